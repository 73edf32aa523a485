from __future__ import annotations

from datetime import datetime, timezone

from conftest import BASE_URL, detail_page, listing_page
from selectolax.lexbor import LexborHTMLParser

from newsroom_sync.config import DetailSettings, default_content_types
from newsroom_sync.engine.parser import Parser, inner_html, parse_day_first

NOW = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)


def _news():
    return default_content_types(BASE_URL)[0]


def _announcements():
    return default_content_types(BASE_URL)[1]


def test_listing_extracts_primary_items() -> None:
    html = listing_page(
        [
            ("Spring graduation ceremony held", "/haber/graduation", "12.05.2024"),
            ("New flight simulator opened", "/haber/simulator", "03.04.2024"),
        ]
    )
    parsed = Parser().parse_listing(_news().listing, html, BASE_URL, NOW)

    assert parsed.used_fallback is False
    assert [candidate.title for candidate in parsed.candidates] == [
        "Spring graduation ceremony held",
        "New flight simulator opened",
    ]
    first = parsed.candidates[0]
    assert first.link == f"{BASE_URL}/haber/graduation"
    assert first.published_at == datetime(2024, 5, 12, tzinfo=timezone.utc)
    assert first.category == "THK Haberleri"
    assert first.thumbnail_url == f"{BASE_URL}/uploads/list-0.jpg"
    assert first.ordinal == 0


def test_listing_drops_short_titles_and_missing_links() -> None:
    html = listing_page(
        [
            ("Tiny", "/haber/tiny", "01.01.2024"),
            ("Exactly five", "", "01.01.2024"),
            ("A long enough headline", "/haber/ok", "01.01.2024"),
        ]
    )
    parsed = Parser().parse_listing(_news().listing, html, BASE_URL, NOW)

    assert [candidate.title for candidate in parsed.candidates] == ["A long enough headline"]
    assert parsed.candidates[0].ordinal == 2


def test_listing_caps_primary_items() -> None:
    items = [(f"Headline number {i:02d}", f"/haber/{i}", "01.01.2024") for i in range(20)]
    parsed = Parser().parse_listing(_news().listing, listing_page(items), BASE_URL, NOW)

    assert len(parsed.candidates) == 15


def test_listing_drops_items_with_unresolvable_links() -> None:
    html = listing_page(
        [
            ("Story with a broken link", "http://[broken/x", "01.01.2024"),
            ("Story with a proper link", "/haber/ok", "01.01.2024"),
        ]
    )
    html = html.replace("/uploads/list-1.jpg", "http://[bad-thumb/1.jpg")
    html += listing_page([("Story with a fine thumbnail", "/haber/fine", "01.01.2024")])
    parsed = Parser().parse_listing(_news().listing, html, BASE_URL, NOW)

    assert [candidate.link for candidate in parsed.candidates] == [f"{BASE_URL}/haber/fine"]


def test_fallback_scan_skips_unresolvable_anchors() -> None:
    anchors = (
        '<a href="http://[broken/haber/x">Broken anchor headline long enough</a>'
        '<a href="/haber/good">Working anchor headline long enough</a>'
    )
    parsed = Parser().parse_listing(_news().listing, f"<body>{anchors}</body>", BASE_URL, NOW)

    assert [candidate.link for candidate in parsed.candidates] == [f"{BASE_URL}/haber/good"]
    assert parsed.candidates[0].ordinal == 0


def test_detail_skips_unresolvable_image_sources() -> None:
    html = detail_page("Title", images=("http://[broken/a.jpg", "/uploads/b.jpg"))
    parsed = Parser().parse_detail(DetailSettings(), html, BASE_URL)

    assert parsed.content.content_image_urls == [f"{BASE_URL}/uploads/b.jpg"]


def test_listing_unparseable_date_defaults_to_now() -> None:
    html = listing_page([("Headline without a date", "/haber/x", "yakında")])
    parsed = Parser().parse_listing(_news().listing, html, BASE_URL, NOW)

    assert parsed.candidates[0].published_at == NOW


def test_announcements_use_secondary_link_selector() -> None:
    html = (
        '<div class="duyuru-page-item"><h5>Registration dates announced</h5>'
        '<div class="date">02.02.2024</div>'
        '<a href="/duyuru/registration">Detay</a></div>'
    )
    parsed = Parser().parse_listing(_announcements().listing, html, BASE_URL, NOW)

    assert parsed.candidates[0].link == f"{BASE_URL}/duyuru/registration"
    assert parsed.candidates[0].category == "THK Duyuruları"
    assert parsed.candidates[0].thumbnail_url is None


def test_fallback_scan_runs_only_without_primary_items() -> None:
    anchors = "".join(
        f'<a href="/haber/item-{i}">Fallback headline long enough number {i}</a>' for i in range(14)
    )
    anchors += '<a href="/about">About the university and its history</a>'
    anchors += '<a href="/haber/short">Short</a>'
    parsed = Parser().parse_listing(_news().listing, f"<body>{anchors}</body>", BASE_URL, NOW)

    assert parsed.used_fallback is True
    assert len(parsed.candidates) == 10
    assert all("/haber/" in candidate.link for candidate in parsed.candidates)
    assert {candidate.category for candidate in parsed.candidates} == {"Genel"}
    assert all(candidate.published_at == NOW for candidate in parsed.candidates)

    html = listing_page([("Primary headline present", "/haber/p", "01.01.2024")]) + anchors
    primary = Parser().parse_listing(_news().listing, html, BASE_URL, NOW)
    assert primary.used_fallback is False
    assert len(primary.candidates) == 1


def test_fallback_scan_with_nothing_matching_is_empty() -> None:
    parsed = Parser().parse_listing(_news().listing, "<body><p>Maintenance</p></body>", BASE_URL, NOW)

    assert parsed.used_fallback is True
    assert parsed.candidates == []


def test_detail_extracts_fields_and_paragraph_markup() -> None:
    html = detail_page(
        "Full headline",
        paragraphs=("First <b>bold</b> line", "Second line"),
        images=("/uploads/a.jpg",),
    )
    parsed = Parser().parse_detail(DetailSettings(), html, BASE_URL)

    content = parsed.content
    assert parsed.container_found is True
    assert content.category == "Kampüs"
    assert content.full_date == "12 Mayıs 2024"
    assert content.full_title == "Full headline"
    assert content.full_content_html == "First <b>bold</b> line\nSecond line\n"
    assert content.content_image_urls == [f"{BASE_URL}/uploads/a.jpg"]


def test_detail_falls_back_to_container_markup() -> None:
    html = '<div class="content-title"><h3>Title</h3><span>Loose text</span></div>'
    parsed = Parser().parse_detail(DetailSettings(), html, BASE_URL)

    assert "<span>Loose text</span>" in parsed.content.full_content_html


def test_detail_without_container_is_empty() -> None:
    parsed = Parser().parse_detail(DetailSettings(), "<body><p>Not here</p></body>", BASE_URL)

    assert parsed.container_found is False
    assert parsed.content.full_content_html == ""
    assert parsed.content.content_image_urls == []


def test_thumbnail_variant_is_not_duplicated() -> None:
    extra = (
        '<div class="duyuru-page-content">'
        '<img src="/uploads/tiny/b.jpg">'
        '<img src="/uploads/big/c.jpg">'
        "</div>"
    )
    html = detail_page(
        "Title",
        images=("/uploads/a.jpg", "/uploads/tiny/b.jpg", "/uploads/d.jpg"),
        extra=extra,
    )
    parsed = Parser().parse_detail(DetailSettings(), html, BASE_URL)

    assert parsed.content.content_image_urls == [
        f"{BASE_URL}/uploads/a.jpg",
        f"{BASE_URL}/uploads/tiny/b.jpg",
        f"{BASE_URL}/uploads/d.jpg",
    ]


def test_thumbnail_variant_outside_container_is_appended() -> None:
    extra = '<div class="duyuru-page-content"><img data-src="/uploads/tiny/e.jpg"></div>'
    html = detail_page("Title", images=("/uploads/a.jpg",), extra=extra)
    parsed = Parser().parse_detail(DetailSettings(), html, BASE_URL)

    assert parsed.content.content_image_urls == [
        f"{BASE_URL}/uploads/a.jpg",
        f"{BASE_URL}/uploads/tiny/e.jpg",
    ]


def test_parse_day_first_rejects_impossible_dates() -> None:
    assert parse_day_first("31.02.2024", NOW) == NOW
    assert parse_day_first("Tarih: 05.11.2023", NOW) == datetime(2023, 11, 5, tzinfo=timezone.utc)


def test_inner_html_strips_wrapping_tag() -> None:
    node = LexborHTMLParser("<p>Hello <i>there</i></p>").css_first("p")
    assert inner_html(node) == "Hello <i>there</i>"
