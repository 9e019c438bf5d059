from datetime import date

import pytest

from finstatements.config import EngineOptions, load_app_config


def _write(tmp_path, text: str):
    path = tmp_path / "finstatements_config.toml"
    path.write_text(text, encoding="utf-8")
    return path


MINIMAL = """
[fiscal_year]
start_date = "2024-04-01"
end_date = "2025-03-31"
"""


def test_minimal_config_uses_defaults(tmp_path) -> None:
    cfg = load_app_config(str(_write(tmp_path, MINIMAL)))

    assert cfg.fiscal_year.start_date == date(2024, 4, 1)
    assert cfg.currency == "JPY"
    assert cfg.minor_unit_digits == 0
    assert cfg.taxonomy_file is None
    assert cfg.engine == EngineOptions()
    assert cfg.display_mode == "table"
    assert cfg.log_level == "WARNING"
    assert cfg.database.engine == "sqlite"
    # Relative paths resolve against the config file's directory
    assert cfg.database.path == (tmp_path / "data/db/finstatements.sqlite").resolve()


def test_full_config(tmp_path) -> None:
    text = MINIMAL + """
[accounting]
currency = "EUR"
minor_unit_digits = 2
taxonomy_file = "taxonomy.csv"

[database]
path = "db.sqlite"

[engine]
max_workers = 2
source_timeout = 1.5

[display]
mode = "both"

[logging]
level = "debug"
"""
    cfg = load_app_config(str(_write(tmp_path, text)))

    assert cfg.currency == "EUR"
    assert cfg.minor_unit_digits == 2
    assert cfg.taxonomy_file == (tmp_path / "taxonomy.csv").resolve()
    assert cfg.database.path == (tmp_path / "db.sqlite").resolve()
    assert cfg.engine == EngineOptions(max_workers=2, source_timeout=1.5)
    assert cfg.display_mode == "both"
    assert cfg.log_level == "DEBUG"


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


def test_missing_fiscal_year_raises(tmp_path) -> None:
    with pytest.raises(ValueError, match="fiscal_year"):
        load_app_config(str(_write(tmp_path, "[display]\nmode = 'table'\n")))


@pytest.mark.parametrize(
    "extra",
    [
        "[accounting]\nminor_unit_digits = 7\n",
        "[engine]\nmax_workers = 0\n",
        "[engine]\nsource_timeout = -1\n",
        "[display]\nmode = 'html'\n",
        "[logging]\nlevel = 'LOUD'\n",
    ],
)
def test_invalid_values_raise(tmp_path, extra) -> None:
    with pytest.raises(ValueError):
        load_app_config(str(_write(tmp_path, MINIMAL + extra)))


def test_inverted_fiscal_year_raises(tmp_path) -> None:
    text = '[fiscal_year]\nstart_date = "2025-01-01"\nend_date = "2024-01-01"\n'
    with pytest.raises(ValueError):
        load_app_config(str(_write(tmp_path, text)))
