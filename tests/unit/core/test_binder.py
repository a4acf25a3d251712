"""Unit tests for the tag binder."""

import pytest
from pydantic import BaseModel, Field

from confmerge.binder import apply_defaults, bind_fields, check_required, is_zero
from confmerge.errors import ParseError, RequiredFieldError
from confmerge.schema import bind


class Level3(BaseModel):
    leaf: str = bind("", env="LEVEL3_LEAF")


class Level2(BaseModel):
    leaf: int = bind(0, env="LEVEL2_LEAF")
    deeper: Level3 = Field(default_factory=Level3)


class Level1(BaseModel):
    leaf: bool = bind(False, env="LEVEL1_LEAF")
    deeper: Level2 = Field(default_factory=Level2)


class Service(BaseModel):
    name: str = bind("", env="NAME")
    port: int = bind(0, env="PORT")
    workers: int = bind(1, env="WORKERS")
    ratio: float = bind(0.5, env="RATIO")
    untagged: str = "keep"
    nested: Level1 = Field(default_factory=Level1)


class Defaults(BaseModel):
    host: str = bind("", env="HOST", default="localhost", required=True)
    port: int = bind(0, env="PORT", default=8080)
    verbose: bool = bind(False, env="VERBOSE", default=True)
    token: str = bind("", env="TOKEN", required=True)


def lookup_from(values: dict[str, str]):
    return values.get


class TestBindFields:
    """Tests for bind_fields."""

    def test_binds_every_nesting_level(self) -> None:
        """Leaves are reached regardless of nesting depth."""
        config = Service()
        values = {"LEVEL1_LEAF": "true", "LEVEL2_LEAF": "2", "LEVEL3_LEAF": "three"}

        assigned = bind_fields(config, "env", values.keys(), lookup_from(values))

        assert assigned == 3
        assert config.nested.leaf is True
        assert config.nested.deeper.leaf == 2
        assert config.nested.deeper.deeper.leaf == "three"

    def test_unauthorized_fields_untouched(self) -> None:
        """A tag outside the authorized set is never written."""
        config = Service()
        values = {"NAME": "api", "PORT": "9000"}

        bind_fields(config, "env", {"NAME"}, lookup_from(values))

        assert config.name == "api"
        assert config.port == 0

    def test_absent_values_untouched(self) -> None:
        """Authorized names with no value keep the current field value."""
        config = Service()

        bind_fields(config, "env", {"WORKERS"}, lookup_from({}))

        assert config.workers == 1

    def test_other_tag_key_ignored(self) -> None:
        """Fields are matched through the requested tag key only."""
        config = Service()

        bind_fields(config, "toml", {"NAME"}, lookup_from({"NAME": "api"}))

        assert config.name == ""

    def test_float_fields_are_not_bound(self) -> None:
        """Float binding is unsupported and leaves the field alone."""
        config = Service()

        assigned = bind_fields(config, "env", {"RATIO"}, lookup_from({"RATIO": "0.9"}))

        assert assigned == 0
        assert config.ratio == 0.5

    def test_malformed_int_names_field(self) -> None:
        """A bad integer raises a ParseError naming the field and value."""
        config = Service()
        values = {"NAME": "api", "PORT": "http", "WORKERS": "4"}

        with pytest.raises(ParseError) as exc_info:
            bind_fields(config, "env", values.keys(), lookup_from(values))

        err = exc_info.value
        assert err.field == "port"
        assert err.variable == "PORT"
        assert err.value == "http"
        assert "port" in str(err)

    def test_malformed_value_keeps_earlier_assignments(self) -> None:
        """Fields bound before the failure keep their values; later ones are skipped."""
        config = Service()
        values = {"NAME": "api", "PORT": "http", "WORKERS": "4"}

        with pytest.raises(ParseError):
            bind_fields(config, "env", values.keys(), lookup_from(values))

        assert config.name == "api"
        assert config.workers == 1

    def test_malformed_bool(self) -> None:
        """A bad boolean raises a ParseError."""
        config = Service()

        with pytest.raises(ParseError) as exc_info:
            bind_fields(config, "env", {"LEVEL1_LEAF"}, lookup_from({"LEVEL1_LEAF": "yes"}))

        assert exc_info.value.field == "nested.leaf"


class TestIsZero:
    """Tests for is_zero."""

    @pytest.mark.parametrize("value", ["", 0, False, None, 0.0, [], {}])
    def test_zero_values(self, value: object) -> None:
        """Empty and zero values count as unset."""
        assert is_zero(value) is True

    @pytest.mark.parametrize("value", ["x", 1, -1, True, 0.1, ["a"]])
    def test_non_zero_values(self, value: object) -> None:
        """Anything else counts as set."""
        assert is_zero(value) is False


class TestApplyDefaults:
    """Tests for apply_defaults."""

    def test_zero_fields_get_defaults(self) -> None:
        """Defaults are converted to the field kind and assigned."""
        config = Defaults()

        applied = apply_defaults(config)

        assert config.host == "localhost"
        assert config.port == 8080
        assert config.verbose is True
        assert applied == ["host", "port", "verbose"]

    def test_bound_values_are_kept(self) -> None:
        """Non-zero fields keep their value."""
        config = Defaults(host="db.internal", port=5432)

        applied = apply_defaults(config)

        assert config.host == "db.internal"
        assert config.port == 5432
        assert applied == ["verbose"]


class TestCheckRequired:
    """Tests for check_required."""

    def test_lists_missing_fields(self) -> None:
        """Every unset required field is reported."""
        with pytest.raises(RequiredFieldError) as exc_info:
            check_required(Defaults())

        assert exc_info.value.fields == ["host", "token"]

    def test_default_satisfies_required(self) -> None:
        """A required field filled by its default passes."""
        config = Defaults(token="secret")
        apply_defaults(config)

        check_required(config)

    def test_required_without_default_fails(self) -> None:
        """A required field with no default and no value fails."""
        config = Defaults()
        apply_defaults(config)

        with pytest.raises(RequiredFieldError) as exc_info:
            check_required(config)

        assert exc_info.value.fields == ["token"]
