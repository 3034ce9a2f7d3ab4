from datetime import datetime

import pytest

from siteforge.errors import Error
from siteforge.page_meta import PageFrontMatter


def test_can_have_empty_front_matter():
    res = PageFrontMatter.parse("  ")
    assert res == PageFrontMatter()
    assert res.in_search_index is True
    assert res.draft is False


def test_can_parse_valid_front_matter():
    content = '''
    title = "Hello"
    description = "hey there"'''
    res = PageFrontMatter.parse(content)
    assert res.title == "Hello"
    assert res.description == "hey there"


def test_errors_with_invalid_front_matter():
    with pytest.raises(Error):
        PageFrontMatter.parse(r"title = 1\n")


def test_errors_on_wrong_type():
    with pytest.raises(Error):
        PageFrontMatter.parse("title = 1")


def test_errors_on_present_but_empty_slug():
    content = '''
    title = "Hello"
    description = "hey there"
    slug = ""'''
    with pytest.raises(Error, match="slug"):
        PageFrontMatter.parse(content)


def test_errors_on_present_but_empty_path():
    content = '''
    title = "Hello"
    description = "hey there"
    path = ""'''
    with pytest.raises(Error, match="path"):
        PageFrontMatter.parse(content)


def test_can_parse_date_yyyy_mm_dd():
    content = '''
    title = "Hello"
    description = "hey there"
    date = 2016-10-10
    '''
    res = PageFrontMatter.parse(content)
    assert res.date == "2016-10-10"
    assert res.datetime == datetime(2016, 10, 10)
    assert res.datetime_tuple == (2016, 10, 10)


def test_can_parse_date_rfc3339():
    content = '''
    title = "Hello"
    description = "hey there"
    date = 2002-10-02T15:00:00Z
    '''
    res = PageFrontMatter.parse(content)
    assert res.date == "2002-10-02T15:00:00Z"
    assert res.datetime == datetime(2002, 10, 2, 15, 0, 0)
    assert res.datetime_tuple == (2002, 10, 2)


def test_rfc3339_keeps_local_time_of_offset():
    res = PageFrontMatter.parse("date = 2002-10-02T15:00:00+02:00")
    assert res.date == "2002-10-02T15:00:00+02:00"
    assert res.datetime == datetime(2002, 10, 2, 15, 0, 0)


def test_local_datetime_without_offset_has_no_datetime():
    res = PageFrontMatter.parse("date = 2002-10-02T15:00:00")
    assert res.date == "2002-10-02T15:00:00"
    assert res.datetime is None
    assert res.datetime_tuple is None


def test_cannot_parse_random_date_format():
    content = '''
    title = "Hello"
    description = "hey there"
    date = 2002/10/12'''
    with pytest.raises(Error):
        PageFrontMatter.parse(content)


def test_cannot_parse_invalid_date_format():
    content = '''
    title = "Hello"
    description = "hey there"
    date = 2002-14-01'''
    with pytest.raises(Error):
        PageFrontMatter.parse(content)


def test_cannot_parse_date_as_string():
    content = '''
    title = "Hello"
    description = "hey there"
    date = "2002-14-01"'''
    with pytest.raises(Error):
        PageFrontMatter.parse(content)


def test_can_parse_dates_in_extra():
    content = '''
    title = "Hello"
    description = "hey there"

    [extra]
    some-date = 2002-10-01'''
    res = PageFrontMatter.parse(content)
    assert res.extra["some-date"] == "2002-10-01"


def test_can_parse_nested_dates_in_extra():
    content = '''
    title = "Hello"
    description = "hey there"

    [extra.something]
    some-date = 2002-10-01'''
    res = PageFrontMatter.parse(content)
    assert res.extra["something"]["some-date"] == "2002-10-01"


def test_can_parse_taxonomies():
    content = '''
title = "Hello World"

[taxonomies]
tags = ["Rust", "JavaScript"]
categories = ["Dev"]
'''
    res = PageFrontMatter.parse(content)
    assert res.taxonomies["categories"] == ["Dev"]
    assert res.taxonomies["tags"] == ["Rust", "JavaScript"]


def test_date_to_datetime_on_unparsable_date():
    meta = PageFrontMatter(date="not a date")
    meta.date_to_datetime()
    assert meta.datetime is None
    assert meta.datetime_tuple is None