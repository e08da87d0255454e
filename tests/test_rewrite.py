"""Unit tests for site_mirror/rewrite.py reference rewriting."""

from bs4 import BeautifulSoup

from site_mirror.rewrite import rewrite_css, rewrite_html, rewrite_references


class TestRewriteReferences:
    """Tests for the textual rewrite_references pass."""

    def test_every_mapped_url_replaced_with_resolving_path(self, tmp_path):
        html_path = tmp_path / "app" / "index.html"
        mapping = {
            "https://example.test/app/img/a.png": tmp_path / "app" / "img" / "a.png",
            "https://cdn.test/lib.js": tmp_path / "lib.js",
            "https://example.test/app/site.css": tmp_path / "app" / "site.css",
        }
        html = (
            '<img src="https://example.test/app/img/a.png">'
            '<script src="https://cdn.test/lib.js"></script>'
            '<link rel="stylesheet" href="https://example.test/app/site.css">'
            '<div data-src="https://example.test/app/img/a.png"></div>'
        )
        out = rewrite_references(html, mapping, html_path)

        for url in mapping:
            assert url not in out
        assert 'src="img/a.png"' in out
        assert 'src="../lib.js"' in out
        assert 'href="site.css"' in out
        assert out.count("img/a.png") == 2
        expected = {
            "img/a.png": mapping["https://example.test/app/img/a.png"],
            "../lib.js": mapping["https://cdn.test/lib.js"],
            "site.css": mapping["https://example.test/app/site.css"],
        }
        for rel, target in expected.items():
            assert (html_path.parent / rel).resolve() == target.resolve()

    def test_protocol_relative_variant(self, tmp_path):
        mapping = {"https://example.test/app/site.css": tmp_path / "app" / "site.css"}
        out = rewrite_references(
            '<link href="//example.test/app/site.css">', mapping, tmp_path / "app" / "index.html"
        )
        assert out == '<link href="site.css">'

    def test_other_scheme_not_left_dangling(self, tmp_path):
        mapping = {"https://example.test/a.png": tmp_path / "a.png"}
        out = rewrite_references('<img src="http://example.test/a.png">', mapping, tmp_path / "index.html")
        assert out == '<img src="a.png">'

    def test_html_escaped_query(self, tmp_path):
        mapping = {"https://example.test/data?x=1&y=2": tmp_path / "data_abc"}
        out = rewrite_references(
            '<a href="https://example.test/data?x=1&amp;y=2">', mapping, tmp_path / "index.html"
        )
        assert out == '<a href="data_abc">'

    def test_prefix_urls_do_not_clobber_each_other(self, tmp_path):
        mapping = {
            "https://example.test/a.css": tmp_path / "a.css",
            "https://example.test/a.css.map": tmp_path / "maps" / "a.css.map",
        }
        text = "https://example.test/a.css https://example.test/a.css.map"
        assert rewrite_references(text, mapping, tmp_path / "index.html") == "a.css maps/a.css.map"

    def test_regex_metacharacters_are_literal(self, tmp_path):
        mapping = {"https://example.test/img/(1)+[x].png": tmp_path / "x.png"}
        text = "https://example.test/img/(1)+[x].png https://example.test/img/1x.png"
        out = rewrite_references(text, mapping, tmp_path / "index.html")
        assert out == "x.png https://example.test/img/1x.png"

    def test_unmapped_text_untouched(self, tmp_path):
        text = "<p>See https://example.test/docs for more</p>"
        assert rewrite_references(text, {}, tmp_path / "index.html") == text


class TestRewriteCss:
    """Tests for rewrite_css."""

    def test_resolves_against_stylesheet_url(self, tmp_path):
        css_path = tmp_path / "app" / "css" / "site.css"
        mapping = {
            "https://example.test/app/css/img/bg.png": tmp_path / "app" / "css" / "img" / "bg.png",
            "https://example.test/app/fonts/x.woff": tmp_path / "app" / "fonts" / "x.woff",
        }
        css = (
            "body { background: url(img/bg.png) }\n"
            "@font-face { src: url('../fonts/x.woff') format('woff') }\n"
            ".dot { background: url(data:image/png;base64,AAAA) }\n"
            ".gone { background: url(img/missing.png) }\n"
        )
        out = rewrite_css(css, "https://example.test/app/css/site.css", mapping, css_path)
        assert 'url("img/bg.png")' in out
        assert 'url("../fonts/x.woff")' in out
        assert "url(data:image/png;base64,AAAA)" in out
        assert "url(img/missing.png)" in out

    def test_import_and_fragment(self, tmp_path):
        css_path = tmp_path / "css" / "site.css"
        mapping = {
            "https://example.test/css/theme.css?v=2": tmp_path / "css" / "theme.css",
            "https://example.test/img/icons.svg": tmp_path / "img" / "icons.svg",
        }
        css = '@import "/css/theme.css?v=2";\n.i { mask: url(/img/icons.svg#home) }'
        out = rewrite_css(css, "https://example.test/css/site.css", mapping, css_path)
        assert '@import "theme.css"' in out
        assert 'url("../img/icons.svg#home")' in out


class TestRewriteHtml:
    """Tests for rewrite_html."""

    PAGE_HTML = """<html><head>
<base href="https://example.test/app/">
<link rel="stylesheet" href="css/site.css" integrity="sha384-abc" crossorigin="anonymous">
</head><body>
<img src="/app/img/a.png" srcset="/app/img/a.png 1x, /app/img/b.png 2x">
<div style="background: url('/app/img/a.png')"></div>
<script>var hero = "https://example.test/app/img/a.png";</script>
<p><a href="/app/page2/">Next</a></p>
</body></html>"""

    def _rewrite(self, tmp_path):
        mapping = {
            "https://example.test/app/img/a.png": tmp_path / "app" / "img" / "a.png",
            "https://example.test/app/css/site.css": tmp_path / "app" / "css" / "site.css",
        }
        return rewrite_html(
            self.PAGE_HTML,
            "https://example.test/app/",
            mapping,
            tmp_path / "app" / "index.html",
        )

    def test_attributes_rewritten(self, tmp_path):
        soup = BeautifulSoup(self._rewrite(tmp_path), "html.parser")
        link = soup.find("link")
        assert link["href"] == "css/site.css"
        assert "integrity" not in link.attrs
        assert "crossorigin" not in link.attrs
        img = soup.find("img")
        assert img["src"] == "img/a.png"
        assert img["srcset"] == "img/a.png 1x, /app/img/b.png 2x"
        assert soup.find("div")["style"] == 'background: url("img/a.png")'

    def test_inline_script_absolute_url(self, tmp_path):
        out = self._rewrite(tmp_path)
        assert 'var hero = "img/a.png";' in out
        assert "https://example.test/app/img/a.png" not in out

    def test_base_removed_and_links_untouched(self, tmp_path):
        out = self._rewrite(tmp_path)
        assert "<base" not in out
        assert 'href="/app/page2/"' in out

    def test_base_removed_without_mapping(self, tmp_path):
        out = rewrite_html(self.PAGE_HTML, "https://example.test/app/", {}, tmp_path / "index.html")
        assert "<base" not in out
        assert 'src="/app/img/a.png"' in out
