"""Unit tests for loading ``site.yaml`` into the configuration snapshot."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from cms_pages.config import SiteConfigError, load_site_config
from cms_pages.config.models import DEFAULT_ROBOTS_RULES


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "site.yaml"
    path.write_text(dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_complete_config(site_yaml: Path, tmp_path: Path) -> None:
    site = load_site_config(site_yaml)

    assert site.seo.site_name == "Valiance Media"
    assert site.seo.site_url == "https://example.com"
    assert site.seo.absolute_url("/pricing") == "https://example.com/pricing"
    assert site.seo.default_keywords == ("seo", "web design")
    assert site.seo.robots.rules == DEFAULT_ROBOTS_RULES
    assert site.paths.output_dir == tmp_path / "public"
    assert [(r.source, r.target, r.permanent) for r in site.redirects] == [
        ("/old-pricing", "/pricing", True),
        ("/promo", "/pricing", False),
    ]


def test_minimal_config_applies_defaults(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        site:
          name: Example
          url: https://example.org
        """,
    )

    site = load_site_config(path)

    assert site.seo.title_template == "{page_name} | {site_name}"
    assert site.seo.sitemap.default_priority == 0.5
    assert site.seo.sitemap.posts_change_frequency == "weekly"
    assert site.paths.app_dir == Path("src/app")
    assert site.redirects == ()


def test_custom_robots_rules(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        site: {name: Example, url: "https://example.org"}
        robots:
          rules:
            - user_agent: GPTBot
              allow: []
              disallow: ["/"]
              crawl_delay: 10
        """,
    )

    (rule,) = load_site_config(path).seo.robots.rules

    assert rule.user_agent == "GPTBot"
    assert rule.allow == ()
    assert rule.disallow == ("/",)
    assert rule.crawl_delay == 10


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_site_config(tmp_path / "absent.yaml")


def test_non_mapping_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, "- just\n- a list\n")

    with pytest.raises(TypeError):
        load_site_config(path)


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("site: {name: Example}\n", "site.url"),
        ("site: {name: Example, url: example.org}\n", "absolute"),
        (
            "site: {name: E, url: 'https://e.org', title_template: '{site_name}'}\n",
            "page_name",
        ),
        (
            "site: {name: E, url: 'https://e.org', "
            "title_template: '{page_name} | {brand}'}\n",
            "placeholders",
        ),
        (
            "site: {name: E, url: 'https://e.org', title_template: '{page_name} {'}\n",
            "placeholders",
        ),
        (
            "site: {name: E, url: 'https://e.org'}\nsitemap: {default_priority: 2}\n",
            "between 0 and 1",
        ),
        (
            "site: {name: E, url: 'https://e.org'}\n"
            "sitemap: {default_change_frequency: sometimes}\n",
            "must be one of",
        ),
        (
            "site: {name: E, url: 'https://e.org'}\nredirects: [{from: /a}]\n",
            "'from' and 'to'",
        ),
    ],
)
def test_invalid_config_raises(tmp_path: Path, body: str, message: str) -> None:
    path = _write(tmp_path, body)

    with pytest.raises(SiteConfigError, match=message):
        load_site_config(path)
