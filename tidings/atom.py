# Atom 1.0 (RFC 4287)
from . import parser
from .parser import xpath, first, text, inner_xml, xml_lang

def find_link(element, rel):
  """href of the first atom:link with the given relation, '' if none"""
  for link in xpath(element, 'atom:link'):
    # a link without rel is an alternate one
    if link.get('rel', 'alternate').strip() == rel:
      return link.get('href', '').strip()
  return ''

def get_content(node):
  """Value of an Atom text construct (text, html or xhtml)"""
  if node is None:
    return ''
  if node.get('type', '').strip().lower() == 'xhtml':
    div = first(node, 'xhtml:div')
    return inner_xml(div if div is not None else node)
  if len(node):
    # unescaped markup published without type="xhtml"
    return inner_xml(node)
  return (node.text or '').strip()

class Atom(parser.Format):
  def find_feed_url(self, xml):
    return find_link(xml, 'self')

  def find_site_url(self, xml):
    return find_link(xml, 'alternate')

  def find_feed_title(self, xml):
    return get_content(first(xml, 'atom:title'))

  def find_feed_description(self, xml):
    return get_content(first(xml, 'atom:subtitle'))

  def find_feed_language(self, xml):
    return xml.get(xml_lang, '').strip()

  def find_feed_id(self, xml):
    return text(xml, 'atom:id')

  def find_feed_date(self, xml):
    return text(xml, 'atom:updated')

  def find_feed_logo(self, xml):
    return text(xml, 'atom:logo') or text(xml, 'atom:icon')

  def get_items_tree(self, xml):
    return xpath(xml, 'atom:entry')

  def find_item_author(self, xml, entry):
    return text(entry, 'atom:author/atom:name') \
           or text(xml, 'atom:author/atom:name')

  def find_item_url(self, entry):
    url = text(entry, 'feedburner:origLink') or find_link(entry, 'alternate')
    if not url:
      link = first(entry, 'atom:link')
      if link is not None:
        url = link.get('href', '').strip()
    return url

  def find_item_title(self, entry):
    return get_content(first(entry, 'atom:title'))

  def find_item_id(self, entry, item, feed):
    return text(entry, 'atom:id')

  def find_item_date(self, entry):
    return text(entry, 'atom:published') or text(entry, 'atom:updated')

  def find_item_content(self, entry):
    return get_content(first(entry, 'atom:content')) \
           or get_content(first(entry, 'atom:summary'))

  def find_item_enclosure(self, entry, feed):
    for link in xpath(entry, 'atom:link[@rel="enclosure"]'):
      return link.get('href', '').strip(), link.get('type', '').strip()
    return '', ''

  def find_item_language(self, entry, feed):
    return entry.get(xml_lang, '').strip()
