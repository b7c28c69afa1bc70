# pkganalysis

Tools for examining how open source packages behave: the record types for an
analysis run, a parser for sandbox strace logs, and a few small file and text
helpers.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Ecosystems

`pkganalysis.ecosystem` names the supported package ecosystems: crates.io,
npm, packagist, pypi and rubygems, plus `Ecosystem.NONE` for the empty name.

```python
from pkganalysis.ecosystem import Ecosystem, parse, parse_purl_type

parse("npm")              # Ecosystem.NPM
parse("")                 # Ecosystem.NONE
parse_purl_type("cargo")  # Ecosystem.CRATES_IO
parse_purl_type("gem")    # Ecosystem.RUBYGEMS
parse("maven")            # raises UnsupportedEcosystemError
```

`ecosystems_as_strings` turns a sequence of ecosystems into their names, and
`SUPPORTED_ECOSYSTEMS_STRINGS` lists the supported names.

## Analysis run records

`pkganalysis.analysisrun` holds the result data classes (`StraceSummary`,
`FileResult`, `SocketResult`, `CommandResult`, `DNSResult`, `FileWriteResult`,
`DynamicAnalysisResults` and others). A `Key` names one package version, and
`AnalysisRunComplete` wraps the key of a finished run:

```python
from pkganalysis.analysisrun import Key, default_dynamic_phases
from pkganalysis.ecosystem import Ecosystem

str(Key(Ecosystem.NPM, "genericpackage", "2.05.0"))  # "npm-genericpackage-2.05.0"
default_dynamic_phases()  # [DynamicPhase.INSTALL, DynamicPhase.IMPORT]
```

## Parsing strace logs

`pkganalysis.strace.parse` reads a sandbox strace log from any iterable of
text lines, such as an open file. It records the files opened, created,
stat'ed, written and deleted, the IPv4 and IPv6 sockets bound or connected,
and the commands executed. Lines it cannot understand are logged and skipped.

```python
from pkganalysis import strace

with open("strace.log") as log:
    result = strace.parse(log, write_file_contents=False)

for info in result.files():      # sorted by path
    print(info.path, info.read, info.write, info.delete)
for sock in result.sockets():    # IPv4 and IPv6 only
    print(sock.address, sock.port)
for cmd in result.commands():
    print(cmd.command, cmd.env)
```

Relative paths from `openat`, `newfstatat` and `unlinkat` are joined to the
directory argument.

With `write_file_contents=True`, each write is listed in the file's
`write_info` with its byte count and the SHA-256 digest of the written
buffer, and the buffer is saved once under `worker_tmp/write_buffers`
(relative to the current directory), named by that digest.

## Temporary write buffers

`pkganalysis.tempfiles` manages that folder:

- `create_and_write_temp_file(file_name, data)` writes a file into it;
- `open_temp_file(file_name)` opens one for reading in binary mode;
- `remove_temp_files_directory()` deletes the folder and everything in it.

## Utilities

`pkganalysis.utils` offers:

- `sha256_hash(path)`: hex SHA-256 digest of a file;
- `combine_regexp(*patterns)`: one pattern joining the given ones with `|`,
  each in a non-capturing group;
- `last_n_bytes(data, n)`: the last `n` bytes (raises `ValueError` for
  negative `n`);
- `remove_duplicates(items)`: unique items in order of first occurrence;
- `float_equals(x1, x2, abs_tol)`: comparison within an absolute tolerance,
  treating two NaNs as equal;
- `write_file(path, contents, executable)`: writes bytes, optionally making
  the file executable;
- `CommaSeparatedFlags`: an option taking a comma-separated list, registered
  on an `argparse` parser with `add_to_parser`.

## What this package does not do

It does not download or unpack package archives, run packages in a sandbox,
or upload results anywhere. It has no command-line program; it provides the
record types, the strace log parser and the helpers above for use from your
own code.