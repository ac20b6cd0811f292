# Entry points: find out which parser handles a document, and find the feed
# of a web site
import requests, html5lib
from . import param, util, encoding, parser, atom, rss
from . import url as urls

class UnsupportedFormat(Exception):
  pass

class AutoDiscoveryError(Exception):
  pass

rss_versions = {
  '2.0': rss.Rss20,
  '0.92': rss.Rss92,
  '0.91': rss.Rss91,
}

feed_types = [
  # Atom is preferred over RSS
  'application/atom+xml',
  'application/rss+xml',
  'application/rdf+xml',
]

# conventional feed locations, tried when a page has no autodiscovery links
suffixes = [
  'feed', 'feed/', 'rss', 'atom', 'feed.xml',
  '/feed', '/feed/', '/rss', '/atom', '/feed.xml',
  'index.atom', 'index.rss', 'index.xml', 'atom.xml', 'rss.xml',
  '/index.atom', '/index.rss', '/index.xml', '/atom.xml', '/rss.xml',
  '.rss', '/.rss', '?rss=1', '?feed=rss2',
]

def detect_format(content, http_encoding='', config=None):
  """Return the format class able to parse content.

  Raises parser.MalformedDocument if content is not XML at all and
  UnsupportedFormat if it is XML but not a feed we know.
  """
  xml = parser.get_xml(encoding.decode(content, http_encoding, config), config)
  tag = xml.tag if isinstance(xml.tag, str) else ''
  if tag == '{%s}feed' % parser.namespaces['atom']:
    return atom.Atom
  if tag == 'rss':
    version = xml.get('version', '').strip()
    return rss_versions.get(version, rss.Rss20)
  if tag == '{%s}RDF' % parser.namespaces['rdf']:
    if xml.find('{%s}channel' % parser.namespaces['rss090']) is not None:
      return rss.Rss90
    return rss.Rss10
  raise UnsupportedFormat(tag or 'no root element')

def parse(content, http_encoding='', url='', config=None):
  """Parse a feed document of any supported format into a model.Feed"""
  config = config or param.Config()
  fmt = detect_format(content, http_encoding, config)
  util.log(config, 'reader: %s detected' % fmt.__name__)
  return parser.execute(fmt(), content, http_encoding, url, config)

def find_feed_links(html, base_url=''):
  """Return the feed URLs advertised by an HTML page, Atom first"""
  tree = html5lib.parse(html, treebuilder='etree', namespaceHTMLElements=False)
  # base for relative URLs
  for base in tree.iter('base'):
    if base.get('href', '').strip():
      base_url = urls.resolve(base.get('href'), base_url)
      break
  found = dict((feed_type, []) for feed_type in feed_types)
  for link in tree.iter('link'):
    attrs = link.attrib
    if 'alternate' not in attrs.get('rel', '').lower().split():
      continue
    feed_type = attrs.get('type', '').strip().lower()
    href = attrs.get('href', '').strip()
    if feed_type not in found or not href:
      continue
    # most likely, if we are autodiscovering a feed, we are interested
    # in the articles, not the comments
    if 'comments' in href.lower():
      continue
    if 'comments feed' in attrs.get('title', '').strip().lower():
      continue
    found[feed_type].append(urls.resolve(href, base_url))
  links = []
  for feed_type in feed_types:
    for link in found[feed_type]:
      if link not in links:
        links.append(link)
  return links

def is_feed(content, http_encoding='', config=None):
  try:
    detect_format(content, http_encoding, config)
    return True
  except (parser.MalformedDocument, UnsupportedFormat):
    return False

def discover(url, config=None):
  """Return the URL of the feed for the page at url.

  The URL itself is returned if it already points to a feed.
  Raises AutoDiscoveryError if no feed can be found.
  """
  config = config or param.Config()
  try:
    r = util.GET(url, config)
    r.raise_for_status()
  except requests.exceptions.RequestException as e:
    raise AutoDiscoveryError('%s: %s' % (url, e))
  base = r.url or url
  if is_feed(r.content, config=config):
    return base
  links = find_feed_links(r.content, base)
  if links:
    util.log(config, 'reader: autodiscovery links', links)
    return links[0]
  # no usable autodiscovery links in the page, try some heuristics
  for suffix in suffixes:
    u = urls.resolve(suffix, base)
    try:
      r = util.GET(u, config)
    except requests.exceptions.RequestException:
      util.print_stack(config)
      continue
    if r.status_code == 200 and is_feed(r.content, config=config):
      util.log(config, 'reader: found feed at', u)
      return u
  raise AutoDiscoveryError('no feed found for %s' % url)
