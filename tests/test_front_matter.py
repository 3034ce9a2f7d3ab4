import pytest

from siteforge.errors import Error
from siteforge.front_matter import split_page_content, split_section_content


def test_can_split_page_content_valid():
    content = '''
+++
title = "Title"
description = "hey there"
date = 2002-10-12
+++
Hello
'''
    front_matter, body = split_page_content("", content)
    assert body == "Hello\n"
    assert front_matter.title == "Title"


def test_can_split_section_content_valid():
    content = '''
+++
paginate_by = 10
+++
Hello
'''
    front_matter, body = split_section_content("", content)
    assert body == "Hello\n"
    assert front_matter.is_paginated()


def test_can_split_content_with_only_frontmatter_valid():
    content = '''
+++
title = "Title"
description = "hey there"
date = 2002-10-12
+++'''
    front_matter, body = split_page_content("", content)
    assert body == ""
    assert front_matter.title == "Title"


def test_can_split_content_lazily():
    content = '''
+++
title = "Title"
description = "hey there"
date = 2002-10-02T15:00:00Z
+++
+++'''
    front_matter, body = split_page_content("", content)
    assert body == "+++"
    assert front_matter.title == "Title"


def test_errors_if_cannot_locate_frontmatter():
    content = '''
+++
title = "Title"
description = "hey there"
date = 2002-10-12'''
    with pytest.raises(Error, match="Couldn't find front matter"):
        split_page_content("", content)


def test_handles_windows_line_endings():
    content = '+++\r\ntitle = "Title"\r\n+++\r\nHello'
    front_matter, body = split_page_content("", content)
    assert body == "Hello"
    assert front_matter.title == "Title"


def test_page_parse_error_is_chained():
    content = "+++\ntitle = 1\n+++\nHello"
    with pytest.raises(Error) as info:
        split_page_content("content/post.md", content)
    assert "content/post.md" in str(info.value)
    assert "page" in str(info.value)
    assert isinstance(info.value.source, Error)


def test_section_parse_error_is_chained():
    content = '+++\nsort_by = "sideways"\n+++\n'
    with pytest.raises(Error) as info:
        split_section_content("content/_index.md", content)
    assert "content/_index.md" in str(info.value)
    assert "section" in str(info.value)
    assert isinstance(info.value.source, Error)