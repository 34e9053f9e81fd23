"""Tests for the photo-index command-line interface."""

import pytest
from click.testing import CliRunner

from photo_index.cli import main
from photo_index.config import DATABASE_URI_ENV


@pytest.fixture(autouse=True)
def quiet_logging(mocker, monkeypatch):
    """Keep the CLI from reconfiguring the root logger during tests."""
    monkeypatch.delenv(DATABASE_URI_ENV, raising=False)
    return mocker.patch("photo_index.cli.setup_logging")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, originals):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"originals_path: {originals}\n"
        f"thumbnails_path: {tmp_path / 'thumbnails'}\n"
        "database:\n"
        f"  uri: sqlite:///{tmp_path / 'catalog.db'}\n",
        encoding="utf-8",
    )
    return path


class TestInitDb:
    """Tests for the init-db command."""

    def test_creates_catalog(self, runner, config_file, tmp_path):
        result = runner.invoke(main, ["--config", str(config_file), "init-db"])

        assert result.exit_code == 0, result.output
        assert "Catalog ready" in result.output
        assert (tmp_path / "catalog.db").exists()

    def test_missing_config(self, runner, tmp_path):
        """Test a nonexistent --config path is a usage error."""
        result = runner.invoke(main, ["--config", str(tmp_path / "missing.yaml"), "init-db"])

        assert result.exit_code != 0
        assert "does not exist" in result.output

    def test_verbose(self, runner, config_file, quiet_logging):
        runner.invoke(main, ["--config", str(config_file), "-v", "init-db"])

        quiet_logging.assert_called_once_with("DEBUG", None)


class TestIndex:
    """Tests for the index command."""

    def test_index(self, runner, config_file, originals, make_jpeg):
        """Test indexing a tree reports the files and catalog counts."""
        make_jpeg(originals / "2021" / "IMG_0001.jpg")
        make_jpeg(originals / "2021" / "IMG_0002.jpg", color=(33, 150, 243))

        result = runner.invoke(main, ["--config", str(config_file), "index"])

        assert result.exit_code == 0, result.output
        assert f"Indexing: {originals}" in result.output
        assert "Indexed 2 files" in result.output
        assert "  photos: 2" in result.output
        assert "  files: 2" in result.output

    def test_index_twice(self, runner, config_file, originals, make_jpeg):
        """Test a second run on an unchanged tree adds nothing."""
        make_jpeg(originals / "IMG_0001.jpg")

        runner.invoke(main, ["--config", str(config_file), "index"])
        result = runner.invoke(main, ["--config", str(config_file), "index"])

        assert result.exit_code == 0, result.output
        assert "  photos: 1" in result.output
        assert "  files: 1" in result.output

    def test_missing_originals_path(self, runner, tmp_path):
        """Test a config without originals_path fails cleanly."""
        path = tmp_path / "config.yaml"
        path.write_text(f"database:\n  uri: sqlite:///{tmp_path / 'catalog.db'}\n", encoding="utf-8")

        result = runner.invoke(main, ["--config", str(path), "index"])

        assert result.exit_code == 1
        assert "originals_path" in result.output

    def test_configured_classifier(self, runner, tmp_path, originals, make_jpeg, monkeypatch):
        """Test the classifier named in the config tags indexed photos."""
        (tmp_path / "cli_vision.py").write_text(
            "from photo_index.classifier import Label\n"
            "\n"
            "\n"
            "class BeachClassifier:\n"
            "    def classify(self, image_path):\n"
            "        return [Label('beach', 0.8)]\n",
            encoding="utf-8",
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        path = tmp_path / "config.yaml"
        path.write_text(
            f"originals_path: {originals}\n"
            f"thumbnails_path: {tmp_path / 'thumbnails'}\n"
            "database:\n"
            f"  uri: sqlite:///{tmp_path / 'catalog.db'}\n"
            "indexer:\n"
            "  classifier: cli_vision:BeachClassifier\n",
            encoding="utf-8",
        )
        make_jpeg(originals / "IMG_0001.jpg")

        result = runner.invoke(main, ["--config", str(path), "index"])

        assert result.exit_code == 0, result.output
        assert "  tags: 1" in result.output

    def test_unknown_classifier(self, runner, tmp_path, originals):
        """Test a classifier that cannot be imported fails cleanly."""
        path = tmp_path / "config.yaml"
        path.write_text(
            f"originals_path: {originals}\n"
            "indexer:\n"
            "  classifier: no_such_models:Classifier\n",
            encoding="utf-8",
        )

        result = runner.invoke(main, ["--config", str(path), "index"])

        assert result.exit_code == 1
        assert "cannot load classifier" in result.output
