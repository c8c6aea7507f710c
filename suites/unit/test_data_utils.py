import json
from datetime import date

import pytest
import yaml

from suites.ui_testing.framework import current_date, load_records


def test_load_json_records(tmp_path):
    path = tmp_path / "users.json"
    path.write_text(
        json.dumps([{"name": "Ana", "age": 31, "email": None}]), encoding="utf-8"
    )

    assert load_records(path) == [{"name": "Ana", "age": "31", "email": ""}]


def test_load_yaml_records(tmp_path):
    path = tmp_path / "users.yml"
    path.write_text(
        yaml.dump([{"name": "Ana", "active": True}, {"name": "Bo"}]), encoding="utf-8"
    )

    records = load_records(path)

    assert records == [{"name": "Ana", "active": "True"}, {"name": "Bo"}]


@pytest.mark.parametrize("content", ['{"name": "Ana"}', '["Ana", "Bo"]'])
def test_load_rejects_non_record_lists(tmp_path, content):
    path = tmp_path / "users.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError, match="list of objects"):
        load_records(path)


def test_current_date_default_format():
    assert current_date(today=date(2024, 3, 7)) == "07/03/2024"


def test_current_date_custom_format():
    assert current_date("%Y-%m-%d", today=date(2024, 3, 7)) == "2024-03-07"
