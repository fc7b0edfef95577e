# wikiprep

Reversible text transforms for Wikipedia XML dumps (such as enwik9) that make
the data easier for a context-mixing compressor to model. Each forward
transform has a matching inverse that rebuilds its input.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `wikiprep.splitting`: `split_by_lines(data, boundaries)` cuts bytes into
  parts at zero-based line numbers. `split_for_compression` writes a dump's
  intro, main body and coda to three files; `split_for_decompression` does the
  same for decompressed data, in which the main body comes first.
  `concatenate(first, second, target)` joins two files.
- `wikiprep.reorder`: `parse_articles` finds `<page>` ... `<id>` ... `</page>`
  runs and returns `Article(id, start, end)` records. `reorder_articles` writes
  the articles in a stored order (numbers are mapped back with
  `build_order_remap`), followed by every article the order does not list;
  `sort_articles` puts them back in page-id order. `reorder_file` and
  `sort_file` work on files.
- `wikiprep.remap`: `build_remap` numbers the articles of a dump so that
  redirect pages are skipped, and `remap_order` renumbers an order list with
  it.
- `wikiprep.entities`: line-level encoders and decoders for HTML entities
  (`encode_entities` / `decode_entities`, `encode_extra_entities` /
  `decode_extra_entities`, `encode_numeric_entities` /
  `decode_numeric_entities`), UTF-8 helpers (`utf8_length`,
  `utf8_to_codepoint`, `codepoint_to_utf8`, `numeric_length`),
  `flip_brackets`, which swaps single and double runs of `{ } [ ]` and is its
  own inverse, and `remove_amp` / `restore_amp`.
- `wikiprep.wit`: `encode_wit` moves page headers and the language links at
  the end of article texts into a tail after the main body, and shortens
  entities; `decode_wit` reverses it. `TailExtractor` and `TailRestorer` handle
  the language links line by line. `preprocess_file` and `restore_file` work
  on files.
- `wikiprep.patterns`: `pattern_transform` replaces the tags around each
  article with a one-byte identifier after `</page>` and returns the new lines
  and the identifier of each pattern; `pattern_detransform` rebuilds the tags
  for the identifiers in `PATTERN_MAP`. `strip`, `lstrip` and `rstrip` trim
  spaces, tabs, carriage returns and newlines. `pattern_transform_file` also
  writes the pattern list (by default to `pattern_map.txt`);
  `pattern_detransform_file` restores a file.
- `wikiprep.fields`: `fields_transform` replaces each page's header markup
  with nine bare field lines followed by its comment and text;
  `fields_detransform` rebuilds the markup. `fields_transform_file` and
  `fields_detransform_file` work on files.
- `wikiprep.container`: the header of a compressed container.
  `write_header(length, vocab, dictionary_used)` returns its bytes,
  `read_header(stream)` decodes it into a `ContainerHeader`,
  `storage_header` gives the header of a stored payload, and `extract_vocab`
  lists which byte values occur in some data.
- `wikiprep.selfextract`: `HeaderInfo`, the three-integer record at the end of
  a self-extracting binary, with `pack` / `unpack` and
  `write_header_info` / `read_header_info`. `extract_compressor_payload` and
  `extract_archive_payload` split such a binary into its parts next to it,
  calling a `runner(source, target)` you supply to decompress the parts that
  need it.
- `wikiprep.runmap`: `State`, a neutral bit-history state machine, and
  `RunMap`, whose states count runs of zeros and ones.

## Example

```python
from wikiprep.entities import decode_entities, encode_entities
from wikiprep.wit import decode_wit, encode_wit

line = b"a &lt; b\n"
assert encode_entities(line) == b"a &< b\n"
assert decode_entities(encode_entities(line)) == line

body = b"some text\n"
assert decode_wit(encode_wit(body)) == body
```

## Command line

Renumber an article order file, dropping redirect pages:

```
wikiprep-remap article_order enwik9 > new_article_order
```

With any other number of arguments it prints a usage line.

## What this package does not do

It holds the text transforms, the container and trailer headers, and the run
map, but no compressor: there is no bit predictor, no model mixing and no
arithmetic coder, and no command that compresses or decompresses a dump or
builds an archive. `extract_compressor_payload` and `extract_archive_payload`
leave decompression to the `runner` you pass them.