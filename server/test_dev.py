from unittest.mock import Mock
from watchfiles import Change

from config import LOCAL_STORE_PATH
from dev import SourceFilter, kill_server


class TestSourceFilter:

    def test_python_and_settings_files_trigger_restart(self):
        source_filter = SourceFilter()
        assert source_filter(Change.modified, '/srv/app/routes/products.py')
        assert source_filter(Change.added, '/srv/app/settings.yaml')

    def test_other_files_are_ignored(self):
        source_filter = SourceFilter()
        assert not source_filter(Change.modified, '/srv/app/app.log')
        assert not source_filter(Change.modified, '/srv/app/__pycache__/main.cpython-312.pyc')

    def test_local_store_writes_are_ignored(self):
        assert not SourceFilter()(Change.modified, LOCAL_STORE_PATH)


class TestKillServer:

    def test_running_process_is_terminated(self):
        process = Mock()
        process.poll.return_value = None
        kill_server(process)
        process.terminate.assert_called_once()
        process.kill.assert_not_called()

    def test_finished_process_is_left_alone(self):
        process = Mock()
        process.poll.return_value = 0
        kill_server(process)
        process.terminate.assert_not_called()
