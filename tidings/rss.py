# The RSS family: 2.0, 0.92 and 0.91 are plain XML, 1.0 and 0.90 are RDF
from . import parser
from .parser import xpath, first, text, inner_xml

def get_content(node):
  """Text of a node, or its markup for HTML published unescaped"""
  if node is None:
    return ''
  if len(node):
    return inner_xml(node)
  return (node.text or '').strip()

class Rss20(parser.Format):
  def find_feed_url(self, xml):
    for link in xpath(xml, 'channel/atom:link'):
      if link.get('rel', '').strip() == 'self':
        return link.get('href', '').strip()
    return ''

  def find_site_url(self, xml):
    return text(xml, 'channel/link')

  def find_feed_title(self, xml):
    return text(xml, 'channel/title')

  def find_feed_description(self, xml):
    return text(xml, 'channel/description')

  def find_feed_language(self, xml):
    return text(xml, 'channel/language') or text(xml, 'channel/dc:language')

  def find_feed_id(self, xml):
    return ''

  def find_feed_date(self, xml):
    return text(xml, 'channel/lastBuildDate') or text(xml, 'channel/pubDate') \
           or text(xml, 'channel/dc:date')

  def find_feed_logo(self, xml):
    return text(xml, 'channel/image/url')

  def get_items_tree(self, xml):
    return xpath(xml, 'channel/item')

  def find_item_author(self, xml, entry):
    return text(entry, 'dc:creator') or text(entry, 'author') \
           or text(xml, 'channel/dc:creator') \
           or text(xml, 'channel/managingEditor')

  def find_item_url(self, entry):
    url = text(entry, 'feedburner:origLink') or text(entry, 'link')
    if url:
      return url
    guid = first(entry, 'guid')
    if guid is not None and guid.get('isPermaLink', 'true').strip() != 'false':
      url = (guid.text or '').strip()
      if url.startswith('http://') or url.startswith('https://'):
        return url
    for link in xpath(entry, 'atom:link'):
      if link.get('rel', 'alternate').strip() == 'alternate':
        return link.get('href', '').strip()
    return ''

  def find_item_title(self, entry):
    return text(entry, 'title')

  def find_item_id(self, entry, item, feed):
    return text(entry, 'guid')

  def find_item_date(self, entry):
    return text(entry, 'pubDate') or text(entry, 'dc:date')

  def find_item_content(self, entry):
    return get_content(first(entry, 'content:encoded')) \
           or get_content(first(entry, 'description'))

  def find_item_enclosure(self, entry, feed):
    for path in ('enclosure', 'media:content'):
      node = first(entry, path)
      if node is not None and node.get('url', '').strip():
        return node.get('url').strip(), node.get('type', '').strip()
    return '', ''

  def find_item_language(self, entry, feed):
    return text(entry, 'dc:language')

class Rss92(Rss20):
  """RSS 0.92, a subset of 2.0"""

class Rss91(Rss20):
  """RSS 0.91, a subset of 2.0 without guid or enclosures"""

class Rss10(parser.Format):
  """RSS 1.0, items are siblings of the channel in an RDF document"""
  prefix = 'rss'

  def path(self, path):
    """Qualify the unprefixed steps of path with the RSS namespace"""
    return '/'.join(
      step if ':' in step or step.startswith('@') else
      '%s:%s' % (self.prefix, step) for step in path.split('/'))

  def find_feed_url(self, xml):
    return ''

  def find_site_url(self, xml):
    return text(xml, self.path('channel/link'))

  def find_feed_title(self, xml):
    return text(xml, self.path('channel/title'))

  def find_feed_description(self, xml):
    return text(xml, self.path('channel/description'))

  def find_feed_language(self, xml):
    return text(xml, self.path('channel/dc:language'))

  def find_feed_id(self, xml):
    return ''

  def find_feed_date(self, xml):
    return text(xml, self.path('channel/dc:date'))

  def find_feed_logo(self, xml):
    return text(xml, self.path('image/url')) \
           or text(xml, self.path('channel/image/url'))

  def get_items_tree(self, xml):
    return xpath(xml, self.path('item'))

  def find_item_author(self, xml, entry):
    return text(entry, 'dc:creator') \
           or text(xml, self.path('channel/dc:creator'))

  def find_item_url(self, entry):
    return text(entry, 'feedburner:origLink') \
           or text(entry, self.path('link')) or text(entry, '@rdf:about')

  def find_item_title(self, entry):
    return text(entry, self.path('title'))

  def find_item_id(self, entry, item, feed):
    return ''

  def find_item_date(self, entry):
    return text(entry, 'dc:date')

  def find_item_content(self, entry):
    return get_content(first(entry, 'content:encoded')) \
           or get_content(first(entry, self.path('description')))

  def find_item_enclosure(self, entry, feed):
    return '', ''

  def find_item_language(self, entry, feed):
    return text(entry, 'dc:language')

class Rss90(Rss10):
  """RSS 0.90, RSS 1.0's Netscape ancestor"""
  prefix = 'rss090'
