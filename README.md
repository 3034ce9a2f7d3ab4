# siteforge

Building blocks for a static site generator: site configuration, theme
data, page and section front matter, and an image resizing queue.

Every failure is raised as `siteforge.errors.Error`. When an error wraps
another one (built with `siteforge.errors.chain`), the wrapped error is
kept as `source` and as `__cause__`.

## Site configuration

`Config.parse` reads a TOML document; `Config.from_file` reads one from
disk. A `base_url` is required (and may not be the placeholder
`http://a-website.com`); every other key has a default. Top-level keys
that a `Config` does not know are ignored; user values belong in the
`[extra]` table. Values of the wrong type raise `Error`.

```python
from siteforge.config import Config

config = Config.parse('''
title = "My site"
base_url = "https://example.com"
ignored_content = ["*.{graphml,iso}", "*.py?"]

[extra]
hello = "world"
''')

config.make_permalink("hello")      # "https://example.com/hello/"
config.make_permalink("rss.xml")    # "https://example.com/rss.xml"
config.make_permalink("")           # "https://example.com/"
config.ignored_content_globset.is_match("foo.iso")   # True
config.ignored_content_globset.is_match("foo.py")    # False
config.extra["hello"]               # "world"
```

`ignored_content` patterns are compiled into a `GlobSet` (supporting
`*`, `**`, `?`, `[...]` classes and `{a,b}` alternates); an invalid
pattern raises `Error`. When the list is empty,
`ignored_content_globset` stays `None`. Parsing also sets
`build_timestamp` to the current Unix time.

`Taxonomy` entries without a `lang` take the site's `default_language`.
`Taxonomy.is_paginated()` is true when `paginate_by` is above zero, and
`Taxonomy.effective_paginate_path()` falls back to `"page"`.
`Config.is_multilingual()` and `Config.languages_codes()` describe the
entries of `languages`.

A theme's `theme.toml` can contribute its own `[extra]` values; values
already present in the site configuration always win:

```python
from siteforge.theme import Theme

config.add_theme_extra(Theme.parse('[extra]\nhello = "foo"\na_value = 10\n'))
config.extra["hello"]     # "world"
config.extra["a_value"]   # 10

config.merge_with_theme("themes/simple/theme.toml")   # same, from a file
```

`get_config(directory, "config.toml")` loads a config from a directory;
on failure it prints the error and raises `SystemExit(1)`.

## Front matter

Content files start with a TOML block between `+++` lines.

```python
from siteforge.front_matter import split_page_content, split_section_content

meta, body = split_page_content("content/post.md", '''
+++
title = "Title"
date = 2002-10-12
+++
Hello
''')
meta.title            # "Title"
meta.date             # "2002-10-12"
meta.datetime_tuple   # (2002, 10, 12)
body                  # "Hello\n"

section, body = split_section_content("content/_index.md", '''
+++
paginate_by = 10
+++
''')
section.is_paginated()   # True
```

A file without a front matter block raises `Error`; a front matter that
does not parse raises an `Error` naming the file, with the parse error
as its cause.

`PageFrontMatter` rejects an empty `slug` or `path` and a `date` that is
not a TOML date or datetime. Dates and times anywhere inside `[extra]`
are turned into strings. `SectionFrontMatter` carries sorting
(`SortBy`), anchor links (`InsertAnchor`), weight, pagination,
templates, redirects, rendering and search-index options; unknown enum
values raise `Error`.

## Image processing

Queue resize operations and get the final URL straight away; the work
runs later in one pass.

```python
from pathlib import Path
from siteforge.imageproc import ImageOp, Processor

processor = Processor(Path("content"), Path("static"), "https://example.com")
op = ImageOp.from_args("gallery/photo.jpg", "fill", 200, 200, "auto", 75)
url = processor.insert(op)
# "https://example.com/processed_images/<16 hex digits>00.jpg"
processor.do_process()   # writes the file under static/processed_images/
processor.prune()        # removes outputs no longer queued
```

Operations are `scale`, `fit_width`, `fit_height`, `fit` and `fill`;
formats are `auto` (JPEG for `.jpg`/`.jpeg` sources, PNG for
`.png`/`.gif`/`.bmp`), `jpeg`/`jpg` and `png`. A missing dimension, an
unknown operation or format, or an unsupported source raises `Error`; a
JPEG quality outside 1–100 raises `ValueError`.

Inserting the same operation twice queues it once
(`Processor.num_img_ops()` counts distinct operations). An output is
rewritten only when it is missing or older than its source.
`Processor.source_exists()` checks a path under the content directory,
and `Processor.set_base_url()` changes the URL prefix of later inserts.

## What this package does not do

It provides no command-line tool and does not build or serve a site.
`highlight_code`, `highlight_theme` and `extra_syntaxes` are stored in
`Config` as given, but the package performs no syntax highlighting and
does not check that the highlight theme exists or load extra syntax
files.