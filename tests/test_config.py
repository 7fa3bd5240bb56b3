import os

from fvg.config import load_environment


def test_env_file_found_in_parent_of_working_directory(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("FVG_TEST_DOTENV_KEY=from-parent\n", encoding="utf-8")
    nested = tmp_path / "scenes" / "ep1"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    monkeypatch.delenv("FVG_TEST_DOTENV_KEY", raising=False)

    try:
        load_environment()
        assert os.environ["FVG_TEST_DOTENV_KEY"] == "from-parent"
    finally:
        os.environ.pop("FVG_TEST_DOTENV_KEY", None)


def test_explicit_env_file_does_not_override_environment(tmp_path, monkeypatch):
    env_file = tmp_path / "keys.env"
    env_file.write_text("FVG_TEST_DOTENV_KEY=from-file\n", encoding="utf-8")
    monkeypatch.setenv("FVG_TEST_DOTENV_KEY", "from-shell")

    load_environment(env_file)

    assert os.environ["FVG_TEST_DOTENV_KEY"] == "from-shell"
