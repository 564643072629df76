# hajserv

A small HTTP/1.0 and HTTP/1.1 server for static files. It listens on one or
more ports in a single non-blocking loop, answers `GET` requests by mapping
the request path onto a directory through `location` blocks, and keeps
connections alive when the client asks for it.

## Installing

```
pip install .
```

## Running

```
hajserv [config_file]
```

Without an argument the server reads `default.conf` from the current
directory. More than one argument prints a usage line and exits with status
1, as does a configuration file that cannot be read or parsed. Stop the
server with Ctrl-C or `SIGTERM`; open connections and listening sockets are
closed before it exits.

## Configuration

The file holds global `key value;` lines and any number of `server { ... }`
blocks. Each directive is exactly one key and one value; a trailing `;` on
the value is dropped. Blank lines and lines starting with `#` are ignored.

```
log_level debug;
log_requests true;
log_connections true;

server {
    listen 8080;
    host 127.0.0.1;
    server_name example;
    timeout 30;
    maxBodySize 4200;

    location / {
        root ./www;
    }

    location /static {
        root ./assets;
    }

    error_pages ./errors {
        404 404.html;
        500 500.html;
    }
}
```

Global keys:

- `log_level` — `debug` prints the parsed configuration at start-up.
- `log_requests` — `true` prints every parsed request.
- `log_connections` — `true` prints a line when a client connects or leaves.

Server keys and their defaults (a missing `listen`, `host` or `server_name`
prints a warning):

- `listen` — port, default `8080`.
- `host` — default `127.0.0.1`. It is shown in the start-up message; the
  socket itself is bound on all interfaces.
- `server_name` — default `default`.
- `timeout` — idle seconds before a connection is dropped, default `30`.
  A value of `0` or less keeps the loop's idle check from closing
  connections.
- `maxBodySize` — default `4200`. It is read and stored on the server.

A request is served from the `location` whose path is the longest prefix of
the request URI; the rest of the URI is appended to that location's `root`.
If no `location` is given, `/` is served from `./`.

## Behaviour

- Only `GET` is served. `POST`, `PUT` and `DELETE` get `501`; other known
  methods get `405`; unknown methods get `400`.
- Versions other than `HTTP/1.0` and `HTTP/1.1` get `505`.
- HTTP/1.1 requests must carry a `Host` header.
- URIs must start with `/`, use only letters, digits and `-_./~%?&=`, and
  must not contain `..`, `//`, backslashes or NUL bytes after
  percent-decoding.
- A request that is rejected gets a plain-text body holding the reason
  phrase and `Connection: close`.
- HTTP/1.1 connections stay open unless the client sends
  `Connection: close`; HTTP/1.0 connections stay open only with
  `Connection: keep-alive`.
- A file that cannot be read, including a directory, gives
  `404 Not Found`.

## What it does not do

- `error_pages` blocks are parsed into the configuration but are not used:
  error responses always carry the plain reason phrase.
- `maxBodySize` is not enforced.
- There is no directory index, no directory listing, no CGI, no uploads and
  no `HEAD` support.

## Using it from Python

```python
from hajserv.config import Config
from hajserv.manager import ServerManager
from hajserv.utils import ShutdownSignal

config = Config()
config.load("default.conf")  # raises ConfigError on failure

manager = ServerManager(log_connections=False, log_requests=False)
for index in range(config.server_count()):
    manager.add_server(config.server_block(index))

with ShutdownSignal() as shutdown:
    shutdown.install()
    manager.start_servers(shutdown)
```

Called without a shutdown signal, `start_servers()` only opens the listening
sockets; drive the loop yourself with `poll_once(timeout)` and finish with
`close()`.

Request parsing is available on its own:

```python
from hajserv.request import RequestError, parse_request

try:
    request = parse_request("GET /index.html HTTP/1.1\r\nHost: x\r\n\r\n")
    print(request.header("host"))
except RequestError as error:
    print(error)  # e.g. "400 Bad Request"; error.status holds the code
```