import os
import tempfile
from pathlib import Path
import unittest
from unittest import mock

from recipes_api.scripts import env_loader


class LoadDotenvTests(unittest.TestCase):
    def test_uses_project_dotenv_by_default(self) -> None:
        with mock.patch.object(env_loader, "load_dotenv", return_value=True) as loader:
            result = env_loader.load_dotenv_file()

        project_root = Path(env_loader.__file__).resolve().parents[2]
        loader.assert_called_once_with(dotenv_path=project_root / ".env", override=False)
        self.assertTrue(result)

    def test_uses_explicit_path(self) -> None:
        with mock.patch.object(env_loader, "load_dotenv", return_value=False) as loader:
            env_loader.load_dotenv_file(Path("/tmp/test.env"), override=True)

        loader.assert_called_once_with(dotenv_path=Path("/tmp/test.env"), override=True)

    def test_reads_variables_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / ".env"
            path.write_text("RECIPES_TEST_ONLY_VALUE=loaded\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {}, clear=False):
                self.assertTrue(env_loader.load_dotenv_file(path))
                self.assertEqual(os.environ["RECIPES_TEST_ONLY_VALUE"], "loaded")
