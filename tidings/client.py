# Feed download, with conditional GET support
import re
from . import param, util

charset_re = re.compile(r'charset\s*=\s*["\']?([^"\';\s]+)', re.IGNORECASE)

class Response:
  def __init__(self, url, content=b'', encoding='', etag='',
               last_modified='', status=200):
    self.url = url
    self.content = content
    # charset from the Content-Type header, '' if none
    self.encoding = encoding
    self.etag = etag
    self.last_modified = last_modified
    self.status = status

  @property
  def not_modified(self):
    return self.status == 304

  def __repr__(self):
    return '<Response %s %s %d bytes>' % (self.status, self.url,
                                           len(self.content))

def get_encoding(content_type):
  """Charset declared in a Content-Type header, '' if none"""
  m = charset_re.search(content_type or '')
  return m.group(1).lower() if m else ''

def fetch(url, config=None, etag=None, last_modified=None):
  """Download a feed.

  Pass the etag and last_modified of a previous Response to only download
  the feed if it changed, the returned Response then has not_modified set.
  Raises requests.exceptions.RequestException on network and HTTP errors.
  """
  config = config or param.Config()
  headers = {}
  if etag:
    headers['If-None-Match'] = etag
  if last_modified:
    headers['If-Modified-Since'] = last_modified
  r = util.GET(url, config, headers=headers)
  if r.status_code == 304:
    util.log(config, 'fetch: %s not modified' % url)
    return Response(r.url or url, etag=etag or '',
                    last_modified=last_modified or '', status=304)
  r.raise_for_status()
  response = Response(
    r.url or url, r.content,
    encoding=get_encoding(r.headers.get('content-type', '')),
    etag=r.headers.get('etag', ''),
    last_modified=r.headers.get('last-modified', ''),
    status=r.status_code)
  util.log(config, 'fetch:', repr(response))
  return response
