# Full article scraper, for feeds that only publish a summary
#
# There is no per-site rule, the main content of the page is guessed from
# the usual markup of blog engines and news sites.
import xml.etree.ElementTree as ET
import requests, html5lib
from . import param, util, htmlfilter
from . import url as urls

# tried in order, the first match wins
candidates = [
  ('tag', 'article'),
  ('attr', ('itemprop', 'articleBody')),
  ('class', 'entry-content'),
  ('class', 'post-content'),
  ('class', 'article-content'),
  ('class', 'article-body'),
  ('class', 'post-body'),
  ('class', 'entry'),
  ('id', 'content'),
  ('id', 'article'),
  ('tag', 'main'),
]

# never part of the article, removed before the largest div is measured
noise_tags = set(['script', 'style', 'nav', 'header', 'footer', 'aside',
                  'form', 'noscript'])

def text_length(element):
  return len(''.join(element.itertext()).strip())

class Grabber:
  """Download a web page and extract its main content"""
  def __init__(self, url, config=None):
    self.url = url
    self.config = config or param.Config()
    self.html = ''
    self.encoding = ''
    self.content = ''

  def download(self):
    """Fetch the page, raises requests.exceptions.RequestException"""
    r = util.GET(self.url, self.config)
    r.raise_for_status()
    # follow redirects, relative URLs are relative to the final page
    self.url = r.url or self.url
    # requests assumes ISO-8859-1 for text/html, html5lib sniffs <meta> better
    if 'charset' in r.headers.get('content-type', '').lower():
      self.encoding = r.encoding or ''
    self.html = r.content
    return self.html

  def matches(self, element, kind, value):
    if kind == 'tag':
      return element.tag == value
    if kind == 'attr':
      attr, expected = value
      return element.get(attr, '') == expected
    if kind == 'class':
      return value in element.get('class', '').split()
    if kind == 'id':
      return element.get('id', '') == value
    return False

  def find_candidate(self, body):
    elements = [e for e in body.iter() if isinstance(e.tag, str)]
    for kind, value in candidates:
      for element in elements:
        if self.matches(element, kind, value) and text_length(element):
          util.log(self.config, 'grabber: using candidate', kind, value)
          return element
    # last resort, the div with the most text
    best, best_length = None, 0
    for element in elements:
      if element.tag == 'div':
        length = text_length(element)
        if length > best_length:
          best, best_length = element, length
    return best

  def strip_noise(self, element):
    for parent in list(element.iter()):
      for child in list(parent):
        if isinstance(child.tag, str) and child.tag in noise_tags:
          # keep the text following the removed element
          if child.tail:
            previous = None
            for sibling in parent:
              if sibling is child:
                break
              previous = sibling
            if previous is not None:
              previous.tail = (previous.tail or '') + child.tail
            else:
              parent.text = (parent.text or '') + child.tail
          parent.remove(child)

  def parse(self):
    """Extract the main content as raw HTML, '' if nothing was found"""
    if not self.html:
      return ''
    kwargs = {'namespaceHTMLElements': False}
    if isinstance(self.html, bytes) and self.encoding:
      kwargs['transport_encoding'] = self.encoding
    tree = html5lib.parse(self.html, treebuilder='etree', **kwargs)
    # relative links in the article are relative to <base href>
    for base in tree.iter('base'):
      if base.get('href', '').strip():
        self.url = urls.resolve(base.get('href'), self.url)
        break
    body = tree.find('body')
    if body is None:
      return ''
    self.strip_noise(body)
    element = self.find_candidate(body)
    if element is None:
      return ''
    out = [htmlfilter.escape_text(element.text or '')]
    for child in element:
      # the tail is serialized along with the element
      out.append(ET.tostring(child, encoding='unicode', method='html'))
    self.content = ''.join(out).strip()
    return self.content

  def get_filtered_content(self):
    """Sanitized content, its links resolved against the final page URL"""
    return htmlfilter.sanitize(self.content, self.url, self.config)

def grab(url, config=None):
  """Return the sanitized main content of the page at url, or None"""
  g = Grabber(url, config)
  try:
    g.download()
    if not g.parse():
      return None
    return g.get_filtered_content() or None
  except (requests.exceptions.RequestException, ValueError):
    util.print_stack(g.config, ['html'])
    return None
