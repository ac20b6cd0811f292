# resolution of the relative, scheme-relative and broken URLs found in feeds
import urllib.parse

def _with_path(url):
  """An URL with a host but no path gets the root path"""
  parts = urllib.parse.urlsplit(url)
  if parts.netloc and not parts.path:
    return urllib.parse.urlunsplit(parts._replace(path='/'))
  return url

def scheme(url):
  """Return the lower-case scheme of an URL, '' for a relative one"""
  try:
    return urllib.parse.urlsplit(url.strip()).scheme.lower()
  except ValueError:
    return ''

def host(url):
  try:
    return (urllib.parse.urlsplit(url.strip()).hostname or '').lower()
  except ValueError:
    return ''

def is_valid(url):
  """False for URLs urllib cannot even split, like //[broken-ipv6"""
  try:
    urllib.parse.urlsplit(url)
  except ValueError:
    return False
  return True

def resolve(url, base):
  """Make url absolute, using base for relative and scheme-relative URLs.
  Broken URLs are returned unchanged."""
  url = (url or '').strip()
  base = (base or '').strip()
  if not url:
    return base
  try:
    if url.startswith('//'):
      return _with_path((scheme(base) or 'http') + ':' + url)
    if scheme(url):
      return url
    if not base:
      return url
    return _with_path(urllib.parse.urljoin(base, url))
  except ValueError:
    return url

def base(url):
  """Return the origin (scheme, host and port, no path) of an URL"""
  try:
    parts = urllib.parse.urlsplit((url or '').strip())
    port = parts.port
  except ValueError:
    return ''
  hostname = parts.hostname
  if not parts.scheme or not hostname:
    return ''
  if ':' in hostname:
    hostname = '[%s]' % hostname
  if port is not None:
    hostname += ':%d' % port
  return '%s://%s' % (parts.scheme.lower(), hostname)

def normalize(url):
  """Canonical form of an absolute URL, used to compare URLs"""
  url = (url or '').strip()
  try:
    parts = urllib.parse.urlsplit(url)
  except ValueError:
    return url
  return urllib.parse.urlunsplit((
    parts.scheme.lower(), parts.netloc.lower(), parts.path or '/',
    parts.query, ''))
