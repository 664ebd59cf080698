import importlib
import os
import sys
import tempfile
from unittest import mock

from django.test import SimpleTestCase


class ProductionSettingsTests(SimpleTestCase):
    def load(self, **env):
        log_dir = tempfile.mkdtemp()
        env = {'SECRET_KEY': 'prod-secret', 'LOG_DIR': log_dir, **env}
        sys.modules.pop('storefront.settings_production', None)
        with mock.patch.dict(os.environ, env, clear=False):
            for key in ('DATABASE_URL', 'DB_NAME', 'DB_HOST', 'DB_PORT'):
                if key not in env:
                    os.environ.pop(key, None)
            module = importlib.import_module('storefront.settings_production')
        sys.modules.pop('storefront.settings_production', None)
        return module, log_dir

    def test_database_url(self):
        module, _ = self.load(DATABASE_URL='postgresql://shop:pw@db.internal:6432/storefront')

        database = module.DATABASES['default']
        self.assertEqual(database['ENGINE'], 'django.db.backends.postgresql')
        self.assertEqual(database['NAME'], 'storefront')
        self.assertEqual(database['USER'], 'shop')
        self.assertEqual(database['PASSWORD'], 'pw')
        self.assertEqual(database['HOST'], 'db.internal')
        self.assertEqual(database['PORT'], 6432)

    def test_individual_db_variables(self):
        module, _ = self.load(DB_NAME='shop', DB_HOST='pg', DB_PORT='5433')

        database = module.DATABASES['default']
        self.assertEqual((database['NAME'], database['HOST'], database['PORT']), ('shop', 'pg', '5433'))
        self.assertFalse(module.DEBUG)

    def test_bundle_warnings_go_to_file(self):
        module, log_dir = self.load()

        handler = module.LOGGING['handlers']['bundles_file']
        self.assertEqual(handler['filename'], os.path.join(log_dir, 'bundles.log'))
        self.assertIn('bundles_file', module.LOGGING['loggers']['bundles']['handlers'])
        self.assertNotIn('bundles_file', module.BASE_LOGGING['loggers']['bundles']['handlers'])

    def test_secret_key_required(self):
        sys.modules.pop('storefront.settings_production', None)
        with mock.patch.dict(os.environ, {'LOG_DIR': tempfile.mkdtemp()}):
            os.environ.pop('SECRET_KEY', None)
            with self.assertRaises(ValueError):
                importlib.import_module('storefront.settings_production')
        sys.modules.pop('storefront.settings_production', None)
