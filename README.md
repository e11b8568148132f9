# katana

The parts of a web crawler that decide what to crawl and how to report it.
It is a library; it has no command-line entry point.

## What is in it

- `katana.utils.scope.Manager` keeps a crawl on its target. It checks DNS
  scope (`dn`, `rdn`, `fqdn` or a custom regex) and optional in-scope and
  out-of-scope URL patterns. Bad patterns raise `ScopeError`.
- `katana.utils.domains` derives the registrable domain of a host name
  (`effective_tld_plus_one`, `domain_rdn_and_dn`). Its suffix table is
  built in and small: generic top-level domains plus common second-level
  registries such as `co.uk`. Anything else falls back to the last label.
- `katana.utils.extensions.Validator` allows or rejects URLs by file
  extension. It comes with a default deny list of media, document and
  archive types. A match list, when given, replaces the deny list.
- `katana.utils.filters.SimpleFilter` is an in-memory filter. It removes
  duplicate URLs and duplicate content (by MD5), and flags URLs that look
  like a navigation loop (`is_cycle`).
- `katana.utils.queue.Queue` is a thread-safe crawl queue. It works
  `depth-first` as a stack, or `breadth-first` as a priority queue where
  lower priorities come out first. `Queue.pop()` is a generator that stops
  once the queue has stayed empty longer than the timeout.
- `katana.utils.regex` pulls endpoints out of HTML bodies
  (`extract_body_endpoints`) and JavaScript sources
  (`extract_relative_endpoints`).
- `katana.utils.formfields.parse_form_fields` finds HTML forms, their
  methods, encodings, actions (resolved against a base URL) and parameter
  names.
- `katana.utils.urls` parses `srcset`, `Link` and `Refresh` values, and has
  a few more URL helpers.
- `katana.types.options.Options` holds crawl settings. It parses custom
  headers and headless browser arguments.
- `katana.output.result` defines `Request`, `Response`, `Result` and
  `ErrorRecord`, each with a compact `to_dict()` JSON form.
- `katana.output.fields.format_field` selects parts of a result URL: `url`,
  `path`, `fqdn`, `rdn`, `rurl`, `qurl`, `qpath`, `file`, `ufile`, `key`,
  `value`, `kv`, `dir`, `udir`, and custom fields.
- `katana.output.custom_field` reads custom field definitions, each a name
  with regular expressions, from a YAML file.
- `katana.output.writer.StandardWriter` prints results to the screen, as
  plain lines or as JSON. It can also:
  - keep or drop results by URL regex, by extension, or by a condition
    expression over the result's fields, such as
    `status_code == 200 && contains(endpoint, "api")`;
  - write results and error records to files;
  - store raw responses per host, with an `index.txt`;
  - append selected fields to per-host files.

  `write()` raises `OutputError` when a result is skipped or cannot be
  written. If no field configuration file is given, the writer creates
  `~/.config/katana/field-config.yaml` with a default `email` field.

## What it does not do

The package fetches nothing. It has no HTTP client, no headless browser,
no crawl loop, no rate limiting and no technology detection. It supplies
the scope, filtering, queueing, extraction and output pieces. Your own
fetching code drives them.

## Installation

```
pip install .
```

## Examples

Check a URL against the crawl scope:

```python
from katana.utils.scope import Manager

manager = Manager([], [r"logout\.php"], "rdn", False)
manager.validate("https://sub.example.com/index.php", "example.com")  # True
manager.validate("https://sub.example.com/logout.php", "example.com")  # False
```

Filter URLs by extension:

```python
from katana.utils.extensions import Validator

validator = Validator([], [".php"])
validator.validate_path("https://example.com/main.php")  # False
```

Remove duplicate URLs:

```python
from katana.utils.filters import SimpleFilter

with SimpleFilter() as seen:
    seen.unique_url("https://example.com")  # True
    seen.unique_url("https://example.com")  # False
```

Queue items breadth-first, with a two-second timeout:

```python
from katana.utils.queue import Queue

queue = Queue("breadth-first", 2)
queue.push("https://example.com/b", 2)
queue.push("https://example.com/a", 1)
for item in queue.pop():
    print(item)  # .../a, then .../b
```

Pick fields out of a result:

```python
from katana.output.result import Request, Result
from katana.output.fields import format_field

result = Result(request=Request(url="https://example.com/docs/a.php?x=1"))
[f.value for f in format_field(result, "dir,file,key")]
# ['/docs/', 'a.php', 'x']
```

Find forms in a page:

```python
from katana.utils.formfields import parse_form_fields

forms = parse_form_fields(
    '<form method="post" action="/login"><input name="user"></form>',
    "https://example.com/path",
)
forms[0].action, forms[0].method, forms[0].parameters
# ('https://example.com/login', 'POST', ['user'])
```

## Tests

```
pip install .[test]
pytest
```