# Format-agnostic feed parsing engine
#
# execute() owns the control flow: decoding, XML parsing, URL resolution,
# dates, filtering and ids. The format classes (see atom.py and rss.py) only
# know where to find each field in their flavour of XML.
import hashlib
from lxml import etree
from . import param, util, encoding, dates, model, htmlfilter, grabber
from . import url as urls

class MalformedDocument(Exception):
  pass

namespaces = {
  'atom': 'http://www.w3.org/2005/Atom',
  'content': 'http://purl.org/rss/1.0/modules/content/',
  'dc': 'http://purl.org/dc/elements/1.1/',
  'feedburner': 'http://rssnamespace.org/feedburner/ext/1.0',
  'media': 'http://search.yahoo.com/mrss/',
  'rdf': 'http://www.w3.org/1999/02/22-rdf-syntax-ns#',
  'rss': 'http://purl.org/rss/1.0/',
  'rss090': 'http://my.netscape.com/rdf/simple/0.9/',
  'xhtml': 'http://www.w3.org/1999/xhtml',
}
xml_lang = '{http://www.w3.org/XML/1998/namespace}lang'

########################################################################
# XML helpers for the format classes

def xpath(element, path):
  return element.xpath(path, namespaces=namespaces)

def first(element, path):
  """First node matching path, or None"""
  for node in xpath(element, path):
    return node
  return None

def text(element, path):
  """Stripped text of the first node matching path, or ''"""
  node = first(element, path)
  if node is None:
    return ''
  if isinstance(node, str):
    return str(node).strip()
  return ''.join(node.itertext()).strip()

def inner_xml(node):
  """Text and markup inside node, for content published as raw (X)HTML"""
  if node is None:
    return ''
  out = [node.text or '']
  for child in node:
    if isinstance(child.tag, str):
      out.append(etree.tostring(child, encoding='unicode', with_tail=False))
    out.append(child.tail or '')
  return ''.join(out).strip()

def get_xml(content, config=None):
  """Build the XML tree, being lenient with broken feeds"""
  data = content.encode('utf-8')
  error = 'empty document'
  for recover in (False, True):
    # never fetch DTDs or expand external entities (XXE)
    parser = etree.XMLParser(recover=recover, resolve_entities=False,
                             no_network=True, collect_ids=False,
                             remove_comments=True, remove_pis=True)
    try:
      root = etree.fromstring(data, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as e:
      util.log(config, 'XML parsing error:', e)
      error = str(e)
      continue
    if root is not None:
      return root
  raise MalformedDocument(error)

########################################################################
# ids

def generate_id(*parts, **kwargs):
  """Hash all arguments, in order, into an item id"""
  h = hashlib.new(kwargs.get('hash_algo') or param.hash_algo)
  h.update(''.join(parts).encode('utf-8'))
  return h.hexdigest()

def get_hash_algo(config):
  try:
    generate_id(hash_algo=config.hash_algo)
    return config.hash_algo
  except (ValueError, TypeError):
    util.log(config, 'unsupported hash algorithm %r, using sha256'
             % config.hash_algo)
    return 'sha256'

########################################################################

class Format:
  """Virtual class with the interface for all feed formats.

  Every hook returns the raw value found in the document, '' (or an empty
  sequence) when the field is absent. Hooks may raise, the engine then
  treats the field as absent.
  """
  def find_feed_url(self, xml):
    raise NotImplementedError
  def find_site_url(self, xml):
    raise NotImplementedError
  def find_feed_title(self, xml):
    raise NotImplementedError
  def find_feed_description(self, xml):
    raise NotImplementedError
  def find_feed_language(self, xml):
    raise NotImplementedError
  def find_feed_id(self, xml):
    raise NotImplementedError
  def find_feed_date(self, xml):
    raise NotImplementedError
  def find_feed_logo(self, xml):
    raise NotImplementedError
  def get_items_tree(self, xml):
    raise NotImplementedError
  def find_item_author(self, xml, entry):
    raise NotImplementedError
  def find_item_url(self, entry):
    raise NotImplementedError
  def find_item_title(self, entry):
    raise NotImplementedError
  def find_item_id(self, entry, item, feed):
    """The identifier the feed gives to the entry, hashed by the engine"""
    raise NotImplementedError
  def find_item_date(self, entry):
    raise NotImplementedError
  def find_item_content(self, entry):
    raise NotImplementedError
  def find_item_enclosure(self, entry, feed):
    """Return a (url, mime type) tuple"""
    raise NotImplementedError
  def find_item_language(self, entry, feed):
    raise NotImplementedError

  def execute(self, content, http_encoding='', fallback_url='', config=None):
    return execute(self, content, http_encoding, fallback_url, config)

def find(config, hook, *args, **kwargs):
  """Call an extraction hook, a failure leaves the field empty"""
  default = kwargs.get('default', '')
  try:
    value = hook(*args)
  except Exception:
    util.print_stack(config, ['xml', 'entry', 'content'])
    return default
  return value or default

def is_ignored(item_url, config):
  """True if the content grabber must skip this item"""
  target = urls.normalize(item_url)
  for ignored in config.grabber_ignore_urls:
    if urls.normalize(ignored) == target:
      return True
  return False

def filter_item_content(feed, item, config):
  if config.enable_filter:
    item.title = htmlfilter.sanitize_text(item.title)
    item.author = htmlfilter.sanitize_text(item.author)
    try:
      item.content = htmlfilter.sanitize(item.content, feed.site_url, config)
    except Exception:
      # one pathological item must not cost the whole feed
      util.print_stack(config, ['content'])
      item.content = htmlfilter.sanitize_text(item.content)
  else:
    util.log(config, 'content filtering disabled')

def scrap_website(item, config):
  """Replace the item content with the full article, if so configured.
  Grabbed pages are sanitized again whatever the grabber returned, the
  original content is kept if the grabber fails."""
  if not config.enable_grabber or not item.url:
    return
  if is_ignored(item.url, config):
    util.log(config, 'grabber: ignoring', item.url)
    return
  grab = config.grabber or grabber.grab
  try:
    html = grab(item.url, config)
  except Exception:
    util.print_stack(config, ['html'])
    return
  if html:
    item.content = htmlfilter.sanitize(html, item.url, config)
  else:
    util.log(config, 'grabber: nothing found for', item.url)

def execute(fmt, content, http_encoding='', fallback_url='', config=None):
  """Parse a feed document of the given format into a model.Feed.

  Raises MalformedDocument if no XML tree can be built at all, every other
  problem only results in empty or default fields.
  """
  config = config or param.Config()
  name = fmt.__class__.__name__
  util.log(config, name + ': begin parsing')
  content = encoding.decode(content, http_encoding, config)
  xml = get_xml(content, config)
  util.log(config, name + ': namespaces', sorted(
    (prefix or '', uri) for prefix, uri in xml.nsmap.items()))
  hash_algo = get_hash_algo(config)

  feed = model.Feed()
  feed.feed_url = urls.resolve(find(config, fmt.find_feed_url, xml),
                               fallback_url)
  site_url = find(config, fmt.find_site_url, xml)
  if site_url:
    # relative to where the feed was fetched, not where it claims to live
    feed.site_url = urls.resolve(site_url, fallback_url or feed.feed_url)
  else:
    feed.site_url = urls.base(feed.feed_url) or feed.feed_url
  feed.title = find(config, fmt.find_feed_title, xml)
  feed.description = find(config, fmt.find_feed_description, xml)
  if config.enable_filter:
    feed.title = htmlfilter.sanitize_text(feed.title)
    feed.description = htmlfilter.sanitize_text(feed.description)
  feed.title = feed.title or feed.site_url
  feed.language = find(config, fmt.find_feed_language, xml)
  feed.id = find(config, fmt.find_feed_id, xml)
  feed.date = dates.parse_date(find(config, fmt.find_feed_date, xml),
                               config.timezone)
  logo_url = find(config, fmt.find_feed_logo, xml)
  if logo_url:
    feed.logo_url = urls.resolve(logo_url, feed.site_url)

  for entry in find(config, fmt.get_items_tree, xml, default=[]):
    item = model.Item()
    item.author = find(config, fmt.find_item_author, xml, entry)
    link = find(config, fmt.find_item_url, entry)
    item.url = urls.resolve(link, feed.site_url)
    item.title = find(config, fmt.find_item_title, entry) or item.url
    item.content = find(config, fmt.find_item_content, entry)
    # the id depends on url, title and content, they must be final here
    entry_id = find(config, fmt.find_item_id, entry, item, feed)
    if entry_id:
      item.id = generate_id(entry_id, hash_algo=hash_algo)
    elif link:
      item.id = generate_id(item.url, hash_algo=hash_algo)
    else:
      # the item URL defaulted to the site's, it would not be unique
      item.id = generate_id(item.title, item.content, hash_algo=hash_algo)
    item.date = dates.parse_date(find(config, fmt.find_item_date, entry),
                                 config.timezone)
    enclosure_url, item.enclosure_type = find(
      config, fmt.find_item_enclosure, entry, feed, default=('', ''))
    if enclosure_url:
      item.enclosure_url = urls.resolve(enclosure_url, feed.site_url)
    item.language = find(config, fmt.find_item_language, entry, feed) \
                    or feed.language
    # order is important, grabbed content is filtered on its own
    filter_item_content(feed, item, config)
    scrap_website(item, config)
    feed.items.append(item)

  util.log(config, name + ':\n' + str(feed))
  return feed
