import pytest
from loguru import logger

from gamtrain.utils.logger import Logging


def test_catch_logs_and_reraises():
    log = Logging()
    captured = []
    logger.add(lambda msg: captured.append(str(msg)))

    @log.catch(msg="training failed")
    def boom():
        raise ValueError("bad")

    with pytest.raises(ValueError):
        boom()

    assert any("[ERROR] boom: training failed" in line for line in captured)


def test_catch_logs_time_and_outputs():
    log = Logging()
    captured = []
    logger.add(lambda msg: captured.append(str(msg)))

    @log.catch(log_outputs=True)
    def answer():
        return 42

    assert answer() == 42
    assert any("[RETURN] answer result=42" in line for line in captured)
    assert any("[TIME] answer took" in line for line in captured)


def test_file_sink_created(tmp_path):
    log = Logging(log_dir=str(tmp_path / "logs"), log_level="DEBUG")
    log.info("hello file sink")
    logger.complete()

    files = list((tmp_path / "logs").glob("gamtrain_*.log"))
    assert len(files) == 1
    assert "hello file sink" in files[0].read_text()
