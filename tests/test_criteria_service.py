"""Tests for criteria storage and the criteria service."""
import pytest
import yaml

from codeanalyzer.core.criteria_service import (
    DEFAULT_TEMPLATES,
    CriteriaService,
    validate_template_data,
)
from codeanalyzer.core.criteria_store import (
    CriteriaStore,
    InMemoryCriteriaStore,
    YamlCriteriaStore,
)
from codeanalyzer.criteria.models import CriteriaTemplate, CriteriaType
from codeanalyzer.errors import CriteriaNotFoundError, CriteriaValidationError


def _data(**overrides):
    data = {
        "name": "Has controllers",
        "description": "At least one controller",
        "category": "Architecture",
        "rules": [{"property": "controllers_count", "operator": "greater_than_or_equal", "value": 1}],
    }
    data.update(overrides)
    return data


@pytest.fixture
def service():
    return CriteriaService(store=InMemoryCriteriaStore())


# ── Stores ──


class TestYamlCriteriaStore:
    def test_put_get_roundtrip(self, tmp_path):
        store = YamlCriteriaStore(tmp_path / "criteria")
        template = CriteriaTemplate(id="t1", name="T", description="d", type=CriteriaType.FULL_CONTENT)
        store.put(template)
        assert (tmp_path / "criteria" / "t1.yaml").is_file()
        loaded = store.get("t1")
        assert loaded.name == "T"
        assert loaded.type is CriteriaType.FULL_CONTENT
        assert store.keys() == ["t1"]

    def test_file_name_wins_over_stored_id(self, tmp_path):
        (tmp_path / "real.yaml").write_text(yaml.dump({"id": "other", "name": "X"}))
        assert YamlCriteriaStore(tmp_path).get("real").id == "real"

    def test_missing_is_none(self, tmp_path):
        assert YamlCriteriaStore(tmp_path).get("nope") is None

    def test_keys_of_missing_directory(self, tmp_path):
        assert YamlCriteriaStore(tmp_path / "absent").keys() == []

    def test_non_mapping_raises(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            YamlCriteriaStore(tmp_path).get("bad")

    @pytest.mark.parametrize("key", ["", "../escape", "a\\b", ".hidden"])
    def test_rejects_unsafe_ids(self, tmp_path, key):
        with pytest.raises(ValueError):
            YamlCriteriaStore(tmp_path).get(key)

    def test_delete(self, tmp_path):
        store = YamlCriteriaStore(tmp_path)
        store.put(CriteriaTemplate(id="t1", name="T"))
        assert store.delete("t1") is True
        assert store.delete("t1") is False

    def test_implements_protocol(self, tmp_path):
        assert isinstance(YamlCriteriaStore(tmp_path), CriteriaStore)
        assert isinstance(InMemoryCriteriaStore(), CriteriaStore)


# ── Validation ──


class TestValidation:
    def test_valid(self):
        assert validate_template_data(_data()) == []

    def test_missing_fields(self):
        errors = validate_template_data({"name": " ", "rules": [{"property": "", "operator": ""}]})
        assert errors == [
            "Criterion name is required",
            "Criterion description is required",
            "Rule 1: property is required",
            "Rule 1: operator is required",
        ]

    def test_no_rules(self):
        assert "Add at least one rule" in validate_template_data(_data(rules=[]))


# ── Service ──


class TestCriteriaService:
    def test_create_assigns_id_and_author(self, service):
        template = service.create_template(_data(id="ignored"), created_by="alice")
        assert template.id != "ignored"
        assert template.created_by == "alice"
        assert template.rules[0].value == "1"
        assert service.get_template(template.id).name == "Has controllers"

    def test_create_invalid_raises(self, service):
        with pytest.raises(CriteriaValidationError) as exc_info:
            service.create_template(_data(name=""))
        assert exc_info.value.errors == ["Criterion name is required"]

    def test_get_missing_raises(self, service):
        with pytest.raises(CriteriaNotFoundError, match="nope"):
            service.get_template("nope")

    def test_update_keeps_identity(self, service):
        created = service.create_template(_data(), created_by="alice")
        updated = service.update_template(created.id, {"name": "Renamed", "is_active": False})
        assert updated.id == created.id
        assert updated.created_at == created.created_at
        assert updated.created_by == "alice"
        assert updated.name == "Renamed"
        assert updated.is_active is False
        assert updated.rules[0].property == "controllers_count"

    def test_update_validates(self, service):
        created = service.create_template(_data())
        with pytest.raises(CriteriaValidationError):
            service.update_template(created.id, {"rules": []})

    def test_delete(self, service):
        created = service.create_template(_data())
        service.delete_template(created.id)
        with pytest.raises(CriteriaNotFoundError):
            service.delete_template(created.id)

    def test_duplicate(self, service):
        created = service.create_template(_data())
        copy = service.duplicate_template(created.id)
        assert copy.id != created.id
        assert copy.name == "Has controllers (Copy)"
        assert copy.rules == created.rules
        assert copy.rules[0] is not created.rules[0]

    def test_list_sorted_by_priority_then_name(self, service):
        service.create_template(_data(name="B", priority=2))
        service.create_template(_data(name="C", priority=1))
        service.create_template(_data(name="A", priority=2, is_active=False))
        assert [t.name for t in service.list_templates()] == ["C", "A", "B"]
        assert [t.name for t in service.list_templates(include_inactive=False)] == ["C", "B"]

    def test_list_skips_corrupt_files(self, tmp_path):
        store = YamlCriteriaStore(tmp_path)
        svc = CriteriaService(store=store)
        svc.create_template(_data())
        (tmp_path / "broken.yaml").write_text("just a string\n")
        assert [t.name for t in svc.list_templates()] == ["Has controllers"]

    def test_categories(self, service):
        service.create_template(_data(name="X", category="Data"))
        service.create_template(_data(name="Y", category="Architecture"))
        service.create_template(_data(name="Z", category="Data"))
        categories = service.categories()
        assert [c.name for c in categories] == ["Architecture", "Data"]
        assert categories[1].count == 2

    def test_user_scoped_operations(self, service):
        mine = service.add_user_criteria("alice", _data(name="Mine"))
        service.add_user_criteria("bob", _data(name="Theirs"))
        assert [t.name for t in service.user_criteria("alice")] == ["Mine"]

        service.update_user_criteria("alice", mine.id, {"priority": 5})
        assert service.get_template(mine.id).priority == 5

        with pytest.raises(CriteriaNotFoundError):
            service.delete_user_criteria("bob", mine.id)
        service.delete_user_criteria("alice", mine.id)
        assert service.user_criteria("alice") == []

    def test_to_analysis_criteria(self, service):
        a = service.create_template(_data(name="A"))
        service.create_template(_data(name="Off", is_active=False))
        assert [c.name for c in service.to_analysis_criteria()] == ["A"]
        (criterion,) = service.to_analysis_criteria([a.id])
        assert criterion.id == a.id
        assert criterion.rules[0].operator == "greater_than_or_equal"

    def test_install_defaults(self, service):
        installed = service.install_defaults()
        assert len(installed) == len(DEFAULT_TEMPLATES)
        assert service.get_template("pages-present").type is CriteriaType.FULL_CONTENT
        assert service.install_defaults() == []
        assert len(service.install_defaults(overwrite=True)) == len(DEFAULT_TEMPLATES)

    def test_default_store_under_data_dir(self, codeanalyzer_home):
        svc = CriteriaService()
        svc.install_defaults()
        assert (codeanalyzer_home / "criteria" / "controllers-present.yaml").is_file()
