import logging

import pytest

from pvtree import ReportShapeError, ResultsType, from_object, string, validator


class TestImportReport:
    def test_round_trip_to_unbound_validator(self, user_validator_factory, user_data, caplog):
        caplog.set_level(logging.DEBUG, logger="pvtree")
        source = user_validator_factory()
        source.validate(user_data(email="wrong@mail.com", profile={"name": "test", "age": 16}))
        target = user_validator_factory()
        target.import_report(source.generate_errors())

        for source_tree, target_tree in ((source, target), (source.nested["profile"], target.nested["profile"])):
            for name, source_item in source_tree.items.items():
                if source_item.valid is False:
                    assert target_tree.items[name].valid is False
                    assert target_tree.items[name].message == source_item.message
                else:
                    assert target_tree.items[name].valid is None
        assert "will be ignored because no object is bound" in caplog.text

    def test_import_writes_values_into_bound_object(self, user_validator_factory, user_data):
        source = user_validator_factory()
        source.validate(user_data(username="", profile={"name": "test", "age": 105}))
        data = user_data()
        target = user_validator_factory().bind(lambda: data)
        target.import_report(source.generate_errors())
        assert data["username"] == ""
        assert data["profile"]["age"] == 105
        assert target.nested["profile"].items["age"].message == "too old"
        assert target.generate_errors() == source.generate_errors()

    def test_import_array_encoding(self, user_validator_factory, user_data):
        source = user_validator_factory(results_type="array")
        info = source.validate_info(user_data(profile={"name": "", "age": 25}))
        target = user_validator_factory(results_type=ResultsType.ARRAY)
        target.import_report(info.results)
        assert target.nested["profile"].items["name"].valid is False
        assert target.nested["profile"].items["name"].message == "must not be empty"

    def test_import_canonical_report(self, user_validator_factory, user_data):
        source = user_validator_factory()
        info = source.validate_info(user_data(username=""))
        target = user_validator_factory(results_type="array")
        target.import_report(info.report)
        assert target.items["username"].message == "must not be empty"

    def test_encoding_is_not_converted(self, user_validator_factory):
        target = user_validator_factory()
        with pytest.raises(ReportShapeError):
            target.import_report({"nested": [{"field": "profile", "result": {}}]})

    def test_unknown_names_are_ignored(self, user_validator_factory, caplog):
        caplog.set_level(logging.DEBUG, logger="pvtree")
        results = {
            "items": [
                {"field": "nickname", "message": "removed field", "valid": False, "value": "x"},
                {"field": "username", "message": "must not be empty", "valid": False, "value": ""},
            ],
            "nested": {"address": {"items": [{"field": "city", "message": "required", "valid": False}]}},
        }
        target = user_validator_factory()
        target.import_report(results)
        assert target.items["username"].valid is False
        assert "Unknown validator item 'nickname' in user" in caplog.text
        assert "'address' is an unknown nested validator in user" in caplog.text

    def test_report_for_validator_without_fields(self, caplog):
        caplog.set_level(logging.DEBUG, logger="pvtree")
        empty = validator(id="empty")
        empty.import_report(from_object({"items": [{"field": "a", "message": "b", "valid": False}], "nested": {}}))
        empty.import_report({"nested": {"child": {}}})
        assert "No simple fields found in empty" in caplog.text
        assert "No nested validator exists in empty" in caplog.text

    def test_import_then_reset(self):
        name_validator = validator(items={"name": string().not_empty()})
        name_validator.import_report({"items": [{"field": "name", "message": "must not be empty", "valid": False}]})
        assert name_validator.all_good() is False
        name_validator.reset()
        assert name_validator.items["name"].valid is None
