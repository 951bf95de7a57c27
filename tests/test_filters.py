from data_extract import ExtractionOptions, project, projection_stage

ROW = {"name": "Alice", "age": "30", "city": "Paris"}


def test_no_projection_returns_record_unchanged():
    assert project(ROW, ExtractionOptions()) is ROW
    assert projection_stage(ExtractionOptions()) is None


def test_allow_list_keeps_known_columns_in_list_order():
    options = ExtractionOptions(columns=["city", "name", "missing"])
    result = project(ROW, options)
    assert result == {"city": "Paris", "name": "Alice"}
    assert list(result) == ["city", "name"]


def test_rename_only():
    options = ExtractionOptions(column_mapping={"name": "fullName", "age": "years", "zip": "postcode"})
    assert project(ROW, options) == {"fullName": "Alice", "years": "30", "city": "Paris"}


def test_allow_list_then_rename():
    options = ExtractionOptions(columns=["name", "age"], column_mapping={"name": "fullName"})
    assert project(ROW, options) == {"fullName": "Alice", "age": "30"}


def test_rename_applies_to_surviving_keys_only():
    options = ExtractionOptions(columns=["name"], column_mapping={"city": "location"})
    assert project(ROW, options) == {"name": "Alice"}


def test_rename_collision_keeps_later_value():
    options = ExtractionOptions(column_mapping={"name": "label", "city": "label"})
    result = project(ROW, options)
    assert result == {"label": "Paris", "age": "30"}


def test_projection_does_not_mutate_input():
    row = dict(ROW)
    project(row, ExtractionOptions(columns=["name"], column_mapping={"name": "n"}))
    assert row == ROW


def test_empty_allow_list_drops_everything():
    assert project(ROW, ExtractionOptions(columns=[])) == {}


def test_projection_stage_matches_project():
    options = ExtractionOptions(columns=["name", "city"], column_mapping={"city": "location"})
    stage = projection_stage(options)
    assert stage(ROW) == project(ROW, options)
