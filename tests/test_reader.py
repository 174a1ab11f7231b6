"""Tests for XML normalization and topic tree building."""

import pytest

from xmind2md import LinkType, MarkerResolver, ParseError, TopicTreeBuilder
from xmind2md.reader import extract_root_topic, sheet_title
from xmind2md.xmlnode import parse_xml

XMAP = (
    '<?xml version="1.0" encoding="UTF-8" standalone="no"?>'
    '<xmap-content xmlns="urn:xmind:xmap:xmlns:content:2.0" '
    'xmlns:xhtml="http://www.w3.org/1999/xhtml" '
    'xmlns:xlink="http://www.w3.org/1999/xlink" version="2.0">'
    '<sheet id="sheet-1">{topic}<title>Sheet 1</title></sheet>'
    "</xmap-content>"
)


def build(xml, **kwargs):
    document = parse_xml(xml)
    return TopicTreeBuilder(**kwargs).build(extract_root_topic(document))


def test_repeatable_elements_are_always_lists():
    node = parse_xml("<topic><children><topics><topic id='a'/></topics></children></topic>")
    children = node.sequence("children")
    assert len(children) == 1
    topics = children[0].sequence("topics")
    assert len(topics) == 1
    assert [t.attr("id") for t in topics[0].sequence("topic")] == ["a"]
    assert node.sequence("marker-ref") == []
    assert node.element("children") is None


def test_singular_elements_keep_first_occurrence():
    node = parse_xml("<topic><title>First</title><title>Second</title></topic>")
    assert node.element("title").text == "First"


def test_namespaces_are_stripped():
    xml = XMAP.format(topic=(
        '<topic id="r" xlink:href="https://example.com">'
        '<title>Root</title><xhtml:img xhtml:src="xap:attachments/pic.png"/></topic>'
    ))
    document = parse_xml(xml)
    assert document.tag == "xmap-content"
    topic = extract_root_topic(document)
    assert topic.attr("href") == "https://example.com"
    assert topic.sequence("img")[0].attr("src") == "xap:attachments/pic.png"


def test_deep_nesting_is_normalized_in_order():
    depth = 5000
    node = parse_xml("<a>" * depth + "</a>" * depth)
    levels = 1
    while node.element("a") is not None:
        node = node.element("a")
        levels += 1
    assert levels == depth

    node = parse_xml("<topic><title>T</title><label>1</label><img/><label>2</label></topic>")
    assert [label.text for label in node.sequence("label")] == ["1", "2"]
    assert node.element("title").text == "T"


def test_malformed_xml_raises_parse_error():
    with pytest.raises(ParseError, match="Failed to parse XML"):
        parse_xml("<xmap-content><sheet></xmap-content>")


def test_missing_root_topic():
    document = parse_xml(XMAP.format(topic=""))
    with pytest.raises(ParseError, match="root topic"):
        extract_root_topic(document)


def test_levels_and_parent_ids():
    root = build(XMAP.format(topic=(
        '<topic id="r"><title>Root</title><children><topics type="attached">'
        '<topic id="a"><title>A</title><children><topics type="attached">'
        '<topic id="a1"><title>A1</title></topic>'
        "</topics></children></topic>"
        '<topic id="b"><title>B</title></topic>'
        "</topics></children></topic>"
    )))

    assert root.level == 0
    assert root.parent_id is None
    assert [c.title for c in root.children] == ["A", "B"]
    assert root.children[0].children[0].title == "A1"

    for topic in root.walk():
        for child in topic.children:
            assert child.level == topic.level + 1
            assert child.parent_id == topic.id


def test_title_fallbacks():
    root = build(
        "<sheet><topic id='r'><title>Root</title><children><topics>"
        "<topic id='a' title='From attribute'/>"
        "<topic id='b'>Inline text</topic>"
        "<topic id='c'><title>   </title></topic>"
        "</topics></children></topic></sheet>"
    )
    assert [c.title for c in root.children] == [
        "From attribute",
        "Inline text",
        "Untitled Topic",
    ]


def test_bare_child_and_container_child_build_the_same_tree():
    bare = build(
        "<sheet><topic id='r'><title>Root</title><children>"
        "<topic id='c'><title>Child</title></topic>"
        "</children></topic></sheet>"
    )
    contained = build(
        "<sheet><topic id='r'><title>Root</title><children><topics type='attached'>"
        "<topic id='c'><title>Child</title></topic>"
        "</topics></children></topic></sheet>"
    )
    assert bare == contained


def test_double_nested_topics_are_flattened():
    root = build(
        "<sheet><topic id='r'><children><topics><topics>"
        "<topic id='a'><title>A</title></topic><topic id='b'><title>B</title></topic>"
        "</topics></topics></children></topic></sheet>"
    )
    assert [c.title for c in root.children] == ["A", "B"]
    assert all(c.level == 1 for c in root.children)


def test_wrapper_topic_is_unwrapped():
    root = build(
        "<sheet><topic id='r'><children><topics>"
        "<topic><topic id='a'><title>A</title></topic><topic id='b'><title>B</title></topic></topic>"
        "</topics></children></topic></sheet>"
    )
    assert [c.title for c in root.children] == ["A", "B"]
    assert root.children[0].parent_id == "r"


def test_empty_children_wrapper():
    root = build("<sheet><topic id='r'><title>Solo</title><children><topics/></children></topic></sheet>")
    assert root.children == ()
    assert root.is_leaf


def test_markers_resolved_in_order():
    root = build(
        "<sheet><topic id='r'><marker-refs>"
        "<marker-ref marker-id='priority-1'/>"
        "<marker-ref marker-id='custom-thing'/>"
        "<marker-ref/>"
        "<marker-ref markerId='flag-red'/>"
        "</marker-refs></topic></sheet>"
    )
    assert root.markers == ("🔴", "[custom-thing]", "🚩")


def test_marker_overrides_apply():
    root = build(
        "<sheet><topic id='r'><marker-refs><marker-ref marker-id='flag-red'/></marker-refs></topic></sheet>",
        resolver=MarkerResolver({"flag-red": "FLAG"}),
    )
    assert root.markers == ("FLAG",)


def test_links_classified_by_href():
    xml = (
        "<sheet><topic id='r'><children><topics>"
        "<topic id='a' href='https://example.com'/>"
        "<topic id='b' href='#other-topic'/>"
        "<topic id='c' href='file:///tmp/report.pdf'/>"
        "<topic id='d' href='./notes.txt'/>"
        "<topic id='e'/>"
        "</topics></children></topic></sheet>"
    )
    types = [c.links[0].type if c.links else None for c in build(xml).children]
    assert types == [LinkType.URL, LinkType.TOPIC, LinkType.FILE, LinkType.FILE, None]


def test_hyperlink_elements_carry_titles():
    root = build(
        "<sheet><topic id='r'><hyperlink href='https://docs.example.com' title='Docs'/></topic></sheet>"
    )
    assert len(root.links) == 1
    assert root.links[0].title == "Docs"
    assert root.links[0].type == LinkType.URL


def test_notes_plain_and_plain_text():
    root = build(
        "<sheet><topic id='r'><notes><plain>Line one\nLine two</plain></notes><children><topics>"
        "<topic id='a'><notes><plain-text>Other variant</plain-text></notes></topic>"
        "<topic id='b'><notes><plain>   </plain></notes></topic>"
        "</topics></children></topic></sheet>"
    )
    assert root.notes == "Line one\nLine two"
    assert root.children[0].notes == "Other variant"
    assert root.children[1].notes is None


def test_structured_labels_are_dropped():
    root = build(
        "<sheet><topic id='r'><labels>"
        "<label>alpha</label><label lang='en'>beta</label><label><b>gamma</b></label>"
        "<label/><label>delta</label>"
        "</labels></topic></sheet>"
    )
    assert root.labels == ("alpha", "delta")


def test_image_attachments():
    xml = XMAP.format(topic=(
        '<topic id="r"><title>Root</title>'
        '<xhtml:img xhtml:src="xap:attachments/diagram.png"/>'
        '<xhtml:img xhtml:src="xap:attachments/"/>'
        "<xhtml:img/>"
        "</topic>"
    ))
    root = build(xml)
    assert [a.filename for a in root.attachments] == ["diagram.png", "image"]
    assert root.attachments[0].path == "xap:attachments/diagram.png"
    assert root.attachments[0].mime_type == "image/png"
    assert root.attachments[0].type.value == "image"


def test_missing_ids_are_generated_and_unique():
    root = build(
        "<sheet><topic><children><topics>"
        "<topic><title>A</title></topic><topic><title>B</title></topic>"
        "<topic id='dup'><title>C</title></topic><topic id='dup'><title>D</title></topic>"
        "</topics></children></topic></sheet>"
    )
    ids = [t.id for t in root.walk()]
    assert len(ids) == len(set(ids)) == 5
    assert root.id.startswith("topic-")
    assert root.children[2].id == "dup"
    assert root.children[3].id != "dup"


def test_max_depth_limits_descent():
    xml = (
        "<sheet><topic id='r'><children><topics><topic id='a'><children><topics>"
        "<topic id='b'/></topics></children></topic></topics></children></topic></sheet>"
    )
    root = build(xml, max_depth=1)
    assert root.count() == 2
    assert root.children[0].is_leaf


def test_sheet_selection():
    xml = (
        "<xmap-content>"
        "<sheet id='s1'><topic id='r1'><title>First</title></topic><title>One</title></sheet>"
        "<sheet id='s2'><topic id='r2'><title>Second</title></topic><title>Two</title></sheet>"
        "</xmap-content>"
    )
    document = parse_xml(xml)
    builder = TopicTreeBuilder()
    assert builder.build(extract_root_topic(document, 1)).title == "Second"
    assert sheet_title(document, 1) == "Two"
    # Out of range falls back to the first sheet
    assert builder.build(extract_root_topic(document, 7)).title == "First"


def test_root_topic_as_document_root():
    root = build("<topic id='r'><title>Bare</title></topic>")
    assert root.title == "Bare"
    assert root.level == 0
