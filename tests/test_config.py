"""
Unit tests for subsync.config module
"""
import unittest
import tempfile
import os
import shutil
import json
import logging
from pathlib import Path
from unittest.mock import patch

from subsync.config import (
    apply_env_overrides,
    configure_logging,
    get_config_path,
    get_default_config,
    load_config,
    logger,
    merge_configs,
)


class TestConfigManagement(unittest.TestCase):
    """Test configuration management functionality"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        env = {k: v for k, v in os.environ.items() if not k.startswith('SUBSYNC_')}
        env['HOME'] = self.temp_dir
        self.env_patch = patch.dict(os.environ, env, clear=True)
        self.env_patch.start()
        self.config_dir = Path(self.temp_dir) / '.subsync'

    def tearDown(self):
        """Clean up test environment"""
        self.env_patch.stop()
        shutil.rmtree(self.temp_dir)

    def write_config(self, filename, content):
        self.config_dir.mkdir(exist_ok=True)
        path = self.config_dir / filename
        path.write_text(content)
        return path

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()

        self.assertEqual(config['list_file'], 'submodules.txt')
        self.assertEqual(config['gitignore_file'], '.gitignore')
        self.assertEqual(config['readme_file'], 'README.md')
        self.assertEqual(config['gitmodules_file'], '.gitmodules')
        self.assertEqual(config['git']['timeout_seconds'], 0)
        self.assertIn('level', config['logging'])

    def test_load_config_no_file(self):
        """Test loading config when no file exists"""
        self.assertEqual(load_config(), get_default_config())
        self.assertEqual(get_config_path(), self.config_dir / 'config.json')

    def test_load_config_json_file(self):
        """Test loading config from JSON file"""
        self.write_config('config.json', json.dumps({
            'list_file': 'deps.txt',
            'git': {'timeout_seconds': 300},
        }))

        config = load_config()

        self.assertEqual(config['list_file'], 'deps.txt')
        self.assertEqual(config['git']['timeout_seconds'], 300)
        self.assertEqual(config['gitmodules_file'], '.gitmodules')

    def test_load_config_toml_file(self):
        """Test loading config from TOML file"""
        self.write_config('config.toml', 'readme_file = "INDEX.md"\n\n[logging]\nlevel = "DEBUG"\n')

        config = load_config()

        self.assertEqual(config['readme_file'], 'INDEX.md')
        self.assertEqual(config['logging']['level'], 'DEBUG')

    def test_load_config_yaml_file(self):
        """Test loading config from YAML file"""
        self.write_config('config.yaml', 'commit_message: Update vendored repos\n')

        self.assertEqual(load_config()['commit_message'], 'Update vendored repos')

    def test_env_config_path(self):
        """Test SUBSYNC_CONFIG pointing at a file elsewhere"""
        path = Path(self.temp_dir) / 'custom.json'
        path.write_text(json.dumps({'list_file': 'custom.txt'}))
        os.environ['SUBSYNC_CONFIG'] = str(path)

        self.assertEqual(get_config_path(), path)
        self.assertEqual(load_config()['list_file'], 'custom.txt')

    def test_invalid_config_falls_back_to_defaults(self):
        """Test that a malformed file is logged and ignored"""
        self.write_config('config.json', '{not json')

        with self.assertLogs('subsync', level='ERROR'):
            config = load_config()

        self.assertEqual(config, get_default_config())

    def test_env_overrides(self):
        """Test SUBSYNC_* environment variables"""
        os.environ['SUBSYNC_LIST_FILE'] = 'repos.txt'
        os.environ['SUBSYNC_GIT_TIMEOUT_SECONDS'] = '600'
        os.environ['SUBSYNC_LOGGING_LEVEL'] = 'warning'
        os.environ['SUBSYNC_UNKNOWN_KEY'] = 'ignored'

        config = apply_env_overrides(get_default_config())

        self.assertEqual(config['list_file'], 'repos.txt')
        self.assertEqual(config['git']['timeout_seconds'], 600)
        self.assertEqual(config['logging']['level'], 'warning')
        self.assertNotIn('unknown_key', config)

    def test_commit_message_key(self):
        """Test the commit hint message is configurable"""
        self.assertEqual(get_default_config()['commit_message'], 'Sync submodules')
        os.environ['SUBSYNC_COMMIT_MESSAGE'] = 'Bump vendored repos'

        self.assertEqual(load_config()['commit_message'], 'Bump vendored repos')

    def test_merge_configs(self):
        """Test recursive merge"""
        merged = merge_configs(
            {'a': 1, 'nested': {'x': 1, 'y': 2}},
            {'nested': {'y': 3}, 'b': 2},
        )
        self.assertEqual(merged, {'a': 1, 'b': 2, 'nested': {'x': 1, 'y': 3}})


class TestConfigureLogging(unittest.TestCase):
    """Test logger level selection"""

    def setUp(self):
        self.original_level = logger.level

    def tearDown(self):
        logger.setLevel(self.original_level)

    def test_debug_flag_wins(self):
        configure_logging({'logging': {'level': 'ERROR'}}, debug=True)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_level_from_config(self):
        configure_logging({'logging': {'level': 'warning'}})
        self.assertEqual(logger.level, logging.WARNING)

    def test_unknown_level(self):
        configure_logging({'logging': {'level': 'LOUD'}})
        self.assertEqual(logger.level, logging.INFO)
