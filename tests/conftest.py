import logging

import pytest

from py_golfflight.conditions import BallProperties, Environment, LaunchConditions
from py_golfflight.interface import _EngineLoader
from py_golfflight.logger import logger

logger.setLevel(logging.DEBUG)

# 5 ms integration step
FAST_ENGINE_CONFIG = {'cStepMultiplier': 10.0}


def pytest_addoption(parser):
    parser.addoption(
        "--engine",
        action="store",
        default=None,  # be sure to use the default value from _EngineLoader
        help="Specify the engine entry point name",
    )


@pytest.fixture(scope="class")
def loaded_engine_instance(request):
    engine_name = request.config.getoption("--engine", None)
    logger.info(f"Attempting to load engine: '{engine_name}'")
    try:
        engine = _EngineLoader.load(engine_name)
        try:
            # probe:
            engine({})
        except Exception as e:
            raise Exception(f"Engine {engine} loaded but probe failed: {e}")
        print(f"Successfully loaded engine: {engine}")
        yield engine
    except Exception as e:
        pytest.exit(f"❌ Cannot start tests:\nFailed to load engine via _EngineLoader: {e}", returncode=1)


@pytest.fixture
def fast_engine(loaded_engine_instance):
    return loaded_engine_instance(dict(FAST_ENGINE_CONFIG))


@pytest.fixture
def environment():
    return Environment()


@pytest.fixture
def ball():
    return BallProperties()


@pytest.fixture
def drive():
    return LaunchConditions(ball_speed=70.0, launch_angle=15.0, spin_rate=2500.0)
