import os
import shutil
import tempfile
import unittest

from hamcrest import assert_that, is_

from ssap import settings

here = os.path.dirname(__file__)
no_user_file = os.path.join(here, 'no-such-user-file.cfg')


class SettingsTest(unittest.TestCase):

    def setUp(self):
        self.saved = {k: getattr(settings, k) for k in ('port', 'http_port', 'poll_interval', 'dtr', 'log_level')}

    def tearDown(self):
        for k, v in self.saved.items():
            setattr(settings, k, v)

    def test_packaged_defaults(self):
        settings.http_port = 1
        settings.poll_interval = 9.0
        settings.configure(user_file=no_user_file)
        assert_that(settings.http_port, is_(15001))
        assert_that(settings.poll_interval, is_(0.03))
        assert_that(settings.dtr, is_(True))
        assert_that(settings.log_level, is_('INFO'))

    def test_configuration_directory(self):
        with tempfile.TemporaryDirectory() as directory:
            shutil.copy(os.path.join(settings.config_directory, 'ssap.schema.cfg'), directory)
            with open(os.path.join(directory, 'ssap.cfg'), 'w') as f:
                f.write('[ssap]\n    [[settings]]\n    port = COM4\n    http_port = 8081\n')
            settings.configure(directory, user_file=no_user_file)
        assert_that(settings.port, is_('COM4'))
        assert_that(settings.http_port, is_(8081))
        assert_that(settings.poll_interval, is_(0.03))

    def test_auto_port(self):
        settings.port = 'AUTO'
        assert_that(settings.auto_port(), is_(True))
        settings.port = 'COM3'
        assert_that(settings.auto_port(), is_(False))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
