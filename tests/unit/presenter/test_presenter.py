"""Unit tests for configuration rendering and masking."""

import pytest
from pydantic import BaseModel, Field

from confmerge.merger import Merger
from confmerge.presenter import mask_string, render_config
from confmerge.schema import bind


class Credentials(BaseModel):
    user: str = bind("", env="DB_USER")
    password: str = bind("", env="DB_PASSWORD", show_last_symbols=2)


class AppConfig(BaseModel):
    port: int = bind(0, env="PORT")
    debug: bool = bind(False, env="DEBUG")
    api_key: str = bind("", env="API_KEY", show_last_symbols=4)
    labels: dict[str, str] = Field(default_factory=dict)
    credentials: Credentials = Field(default_factory=Credentials)


class TestMaskString:
    """Tests for mask_string."""

    @pytest.mark.parametrize(
        ("value", "show_last", "expected"),
        [
            ("supersecret", 4, "*******cret"),
            ("abc", 1, "**c"),
            ("abc", 0, "***"),
            ("abc", 3, "abc"),
            ("abc", 10, "abc"),
            ("", 2, ""),
        ],
    )
    def test_masking(self, value: str, show_last: int, expected: str) -> None:
        """Only the last N characters stay readable."""
        assert mask_string(value, show_last) == expected


class TestRenderConfig:
    """Tests for render_config."""

    def test_renders_tree(self) -> None:
        """Nested records and mappings are indented, tagged fields masked."""
        config = AppConfig(
            port=8080,
            debug=True,
            api_key="sk-1234567890",
            labels={"team": "core"},
            credentials=Credentials(user="admin", password="hunter42"),
        )

        assert render_config(config) == "\n".join([
            "AppConfig",
            "  port: 8080",
            "  debug: true",
            "  api_key: *********7890",
            "  labels:",
            "    team: core",
            "  credentials:",
            "    user: admin",
            "    password: ******42",
        ])

    def test_print_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Merger.print_config writes the rendering to stdout."""
        config = AppConfig(api_key="abcdef")
        Merger(config).print_config()

        out = capsys.readouterr().out
        assert out.startswith("AppConfig\n")
        assert "  api_key: **cdef" in out
        assert "    password: " in out
