# This file is part of the TileProxy project.
# Copyright (C) 2026 TileProxy contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
HTTP client for upstream tile servers.
"""
import functools
import socket
import ssl
import threading
import time
from http import client as httplib
from urllib import request as urllib2
from urllib.error import URLError, HTTPError

from tileproxy.version import version
from tileproxy.client.log import log_request


class HTTPClientError(Exception):
    def __init__(self, arg, response_code=None, full_msg=None):
        Exception.__init__(self, arg)
        self.response_code = response_code
        self.full_msg = full_msg


class HTTPClientTimeout(HTTPClientError):
    """
    The upstream server did not deliver the complete response within the
    timeout.
    """
    pass


class Watchdog(object):
    """
    Aborts the connection of a request when `timeout` seconds have passed.

    The connection registers its socket with `watch`. When the timer fires
    the socket is shut down, which ends any blocking connect, send or recv
    on it. `expired` tells the caller that the request was aborted.
    """
    def __init__(self, timeout):
        self.timeout = timeout
        self.expired = False
        self._sock = None
        self._lock = threading.Lock()
        self._timer = threading.Timer(timeout, self._expire)
        self._timer.daemon = True

    def start(self):
        self._timer.start()

    def cancel(self):
        self._timer.cancel()

    def watch(self, sock):
        with self._lock:
            self._sock = sock
            if self.expired:
                self._abort()

    def _expire(self):
        with self._lock:
            self.expired = True
            self._abort()

    def _abort(self):
        if self._sock is None:
            return
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already closed
            pass


class _WatchedHTTPConnection(httplib.HTTPConnection):
    def __init__(self, *args, watchdog=None, **kw):
        httplib.HTTPConnection.__init__(self, *args, **kw)
        self.watchdog = watchdog

    def connect(self):
        httplib.HTTPConnection.connect(self)
        if self.watchdog is not None:
            self.watchdog.watch(self.sock)


class _WatchedHTTPSConnection(httplib.HTTPSConnection):
    def __init__(self, *args, watchdog=None, **kw):
        httplib.HTTPSConnection.__init__(self, *args, **kw)
        self.watchdog = watchdog

    def connect(self):
        httplib.HTTPSConnection.connect(self)
        if self.watchdog is not None:
            self.watchdog.watch(self.sock)


class _WatchedHTTPHandler(urllib2.HTTPHandler):
    def http_open(self, req):
        return self.do_open(
            functools.partial(_WatchedHTTPConnection, watchdog=getattr(req, 'watchdog', None)), req)


class _WatchedHTTPSHandler(urllib2.HTTPSHandler):
    def https_open(self, req):
        return self.do_open(
            functools.partial(_WatchedHTTPSConnection, watchdog=getattr(req, 'watchdog', None)),
            req, context=self._context)


class _WatchedRedirectHandler(urllib2.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):
        new_req = urllib2.HTTPRedirectHandler.redirect_request(
            self, req, fp, code, msg, headers, newurl)
        if new_req is not None:
            new_req.watchdog = getattr(req, 'watchdog', None)
        return new_req


def default_user_agent():
    return 'TileProxy/%s (Tile Cache Proxy)' % (version, )


def build_https_handler(ssl_ca_certs, insecure):
    if insecure:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    elif ssl_ca_certs:
        ctx = ssl.create_default_context(cafile=ssl_ca_certs)
    else:
        ctx = ssl.create_default_context()
    return _WatchedHTTPSHandler(context=ctx)


class _URLOpenerCache(object):
    """
    Creates custom URLOpener with HTTPS handler.

    Caches and reuses opener if possible (i.e. if they share the same
    ssl_ca_certs).
    """
    def __init__(self):
        self._opener = {}

    def __call__(self, ssl_ca_certs, insecure=False):
        cache_key = (ssl_ca_certs, insecure)
        if cache_key not in self._opener:
            https_handler = build_https_handler(ssl_ca_certs, insecure)
            self._opener[cache_key] = urllib2.build_opener(
                _WatchedHTTPHandler, https_handler, _WatchedRedirectHandler)
        return self._opener[cache_key]

create_url_opener = _URLOpenerCache()


class HTTPResult(object):
    """
    Complete response of a successful request.
    """
    def __init__(self, url, code, headers, body):
        self.url = url
        self.code = code
        self.headers = headers
        self.body = body

    @property
    def content_type(self):
        return self.headers.get('Content-Type')

    def __repr__(self):
        return '%s(%r, %d, <%d bytes>)' % (self.__class__.__name__, self.url, self.code, len(self.body))


class HTTPClient(object):
    """
    Blocking HTTP GET client with a total deadline per request.

    The `timeout` covers connecting, waiting for the response and reading
    the body. A `Watchdog` shuts down the connection when it is exceeded,
    even if the server keeps sending single bytes. The aborted request
    raises `HTTPClientTimeout`.
    """
    block_size = 1024 * 32

    def __init__(self, timeout=None, user_agent=None, headers=None, insecure=False,
                 ssl_ca_certs=None, hide_error_details=False):
        self._timeout = timeout
        self.opener = create_url_opener(ssl_ca_certs, insecure=insecure)
        self.header_list = [('User-Agent', user_agent or default_user_agent())]
        if headers:
            self.header_list.extend(headers.items())
        self.hide_error_details = hide_error_details

    def open(self, url, timeout=None):
        """
        GET `url` and return the complete `HTTPResult`.

        :param timeout: overrides the default timeout of this client
        :raises HTTPClientTimeout: if the response did not arrive in time
        :raises HTTPClientError: for all other errors, with ``response_code``
            set for non-2xx responses
        """
        if timeout is None:
            timeout = self._timeout
        code = None
        size = None
        start_time = time.time()
        try:
            req = urllib2.Request(url)
        except ValueError as e:
            raise self.handle_url_exception(url, 'URL not correct', e.args[0]) from e
        for key, value in self.header_list:
            req.add_header(key, value)
        watchdog = None
        if timeout is not None:
            watchdog = req.watchdog = Watchdog(timeout)
            watchdog.start()
        try:
            try:
                if timeout is not None:
                    result = self.opener.open(req, timeout=timeout)
                else:
                    result = self.opener.open(req)
                code = getattr(result, 'code', 200)
                body = self._read_body(result)
            except HTTPError:
                raise
            except (httplib.HTTPException, OSError, ValueError) as e:
                # errors of the aborted connection
                if watchdog is not None and watchdog.expired:
                    raise self.handle_timeout(url, timeout) from e
                raise
            if watchdog is not None and watchdog.expired:
                # responses without Content-Length end early on abort
                raise self.handle_timeout(url, timeout)
            size = len(body)
        except HTTPError as e:
            code = e.code
            e.close()
            raise self.handle_url_exception(url, 'HTTP Error', str(code), response_code=code) from e
        except URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise self.handle_timeout(url, timeout) from e
            if isinstance(e.reason, ssl.SSLError):
                raise self.handle_url_exception(url, 'Could not verify connection to URL', e.reason) from e
            try:
                reason = e.reason.args[1]
            except (AttributeError, IndexError):
                reason = e.reason
            raise self.handle_url_exception(url, 'No response from URL', reason) from e
        except socket.timeout as e:
            raise self.handle_timeout(url, timeout) from e
        except ValueError as e:
            raise self.handle_url_exception(url, 'URL not correct', e.args[0]) from e
        except (httplib.HTTPException, OSError) as e:
            raise self.handle_url_exception(url, 'No response from URL', repr(e)) from e
        finally:
            if watchdog is not None:
                watchdog.cancel()
            log_request(url, code, size=size, duration=time.time() - start_time)

        if not 200 <= code < 300:
            raise self.handle_url_exception(url, 'HTTP Error', str(code), response_code=code)
        return HTTPResult(url, code, result.headers, body)

    def _read_body(self, resp):
        chunks = []
        try:
            while True:
                chunk = resp.read(self.block_size)
                if not chunk:
                    break
                chunks.append(chunk)
        finally:
            resp.close()
        return b''.join(chunks)

    def handle_timeout(self, url, timeout):
        full_msg = 'No response from URL "%s" within %ss' % (url, timeout)
        if self.hide_error_details:
            return HTTPClientTimeout('Timeout (see logs for URL).', full_msg=full_msg)
        return HTTPClientTimeout(full_msg)

    def handle_url_exception(self, url, message, reason, response_code=None):
        full_msg = '%s "%s": %s' % (message, url, reason)
        if self.hide_error_details:
            return HTTPClientError(
                '{} (see logs for URL and reason).'.format(message),
                response_code=response_code,
                full_msg=full_msg,
            )
        else:
            return HTTPClientError(
                full_msg,
                response_code=response_code,
            )
