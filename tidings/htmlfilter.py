# Whitelist-based HTML sanitizer for feed item content
#
# Anything not explicitly allowed is removed. Disallowed tags are unwrapped
# (their text survives), except for the blacklisted ones whose content is
# dangerous or meaningless and is dropped along with the tag. We cannot trust
# feed authors, so the output must be safe to embed as-is in a web page.
import re, html5lib, bleach
from . import param, url as urls

tag_whitelist = set([
  'a', 'abbr', 'audio', 'b', 'blockquote', 'br', 'caption', 'cite', 'code',
  'dd', 'del', 'dfn', 'dl', 'dt', 'em', 'figcaption', 'figure',
  'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'hr', 'i', 'iframe', 'img', 'ins',
  'kbd', 'li', 'mark', 'ol', 'p', 'pre', 'q', 's', 'samp', 'small', 'source',
  'strike', 'strong', 'sub', 'sup', 'table', 'tbody', 'td', 'tfoot', 'th',
  'thead', 'time', 'tr', 'u', 'ul', 'var', 'video',
])

# these are removed with everything they contain
tag_blacklist = set([
  'applet', 'button', 'embed', 'form', 'frame', 'frameset', 'head', 'math',
  'noembed', 'noframes', 'noscript', 'object', 'script', 'select', 'style',
  'svg', 'template', 'textarea', 'title',
])

attribute_whitelist = {
  'a': ['href', 'title'],
  'abbr': ['title'],
  'audio': ['controls', 'src'],
  'blockquote': ['cite'],
  'del': ['datetime'],
  'iframe': ['src', 'width', 'height', 'frameborder', 'allowfullscreen'],
  'img': ['src', 'alt', 'title'],
  'ins': ['datetime'],
  'q': ['cite'],
  'source': ['src', 'type'],
  'td': ['colspan', 'rowspan'],
  'th': ['colspan', 'rowspan'],
  'time': ['datetime'],
  'video': ['poster', 'controls', 'height', 'width', 'src'],
}

# local schemes like file: or dangerous ones like javascript: are excluded
scheme_whitelist = ['http', 'https', 'ftp', 'mailto']

# only these hosts (and their subdomains) may be embedded in an iframe
embed_whitelist = [
  'youtube.com', 'youtube-nocookie.com', 'player.vimeo.com', 'dailymotion.com',
]

# web bugs, ads and share buttons, elements pointing there are dropped
media_blacklist = [
  'feeds.feedburner.com', 'feedsportal.com', 'feeds.wordpress.com',
  'stats.wordpress.com', 'doubleclick.net', 'googleadservices.com',
  'pheedo.com', 'quantserve.com', 'invitemedia.com', 'api.flattr.com',
  'twitter.com/home?status', 'twitter.com/share', 'facebook.com/sharer',
  'plus.google.com/share',
]

# dimensions and the like must be bare non-negative integers
integer_attributes = ['width', 'height', 'frameborder', 'colspan', 'rowspan']

required_attributes = {
  'a': ['href'],
  'iframe': ['src'],
  'img': ['src'],
  'source': ['src'],
}

# reverse tabnabbing and referrer leaks
add_attributes = {
  'a': [('rel', 'noreferrer'), ('target', '_blank')],
}

url_attributes = set(['src', 'href', 'cite', 'poster'])
embed_tags = set(['iframe'])
void_tags = set(['br', 'hr', 'img', 'source', 'track', 'wbr'])
# elements that are visible even without any text in them
media_tags = set(['img', 'iframe', 'video', 'audio'])
# whitespace in there is significant
literal_tags = set(['pre', 'code'])
cell_tags = set(['td', 'th'])
# elements nested deeper than this are flattened to their text
max_depth = 100

integer_re = re.compile('^[0-9]+$')
# browsers ignore these in URLs, so javascript: can be spelt java\tscript:
url_junk_re = re.compile('[\x00-\x1f]')

def sanitize_text(text):
  """Sanitize text fields like title or feed description for XSS"""
  return bleach.clean(
    text,
    tags=set(),
    attributes={},
    strip=True
  )

class Tag:
  def __init__(self, name, attrs):
    self.name = name
    self.attrs = attrs
    self.children = []

  def __repr__(self):
    return '<Tag %s %r>' % (self.name, self.attrs)

def children(element):
  """Text and child elements of an ElementTree element, in document order"""
  if element.text:
    yield element.text
  for child in element:
    yield child
    if child.tail:
      yield child.tail

def text_content(element, skipped):
  """Text of a subtree minus the elements named in skipped, no recursion"""
  out = []
  stack = [element]
  while stack:
    node = stack.pop()
    if isinstance(node, str):
      out.append(node)
    elif isinstance(node.tag, str) \
         and node.tag.rsplit('}', 1)[-1].lower() not in skipped:
      stack.extend(reversed(list(children(node))))
  return ''.join(out)

def has_content(tag):
  """True if the tag renders anything visible"""
  for child in tag.children:
    if isinstance(child, str):
      if child.strip():
        return True
    elif child.name in media_tags or has_content(child):
      return True
  return False

def find_all(tag, names):
  for child in tag.children:
    if not isinstance(child, str):
      if child.name in names:
        yield child
      for descendant in find_all(child, names):
        yield descendant

def escape_text(s):
  return s.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')

def escape_attribute(s):
  return escape_text(s).replace('"', '&quot;').replace("'", '&#039;')

def serialize(nodes):
  out = []
  for node in nodes:
    if isinstance(node, str):
      out.append(escape_text(node))
      continue
    attrs = ''.join(' %s="%s"' % (name, escape_attribute(value))
                    for name, value in node.attrs.items())
    if node.name in void_tags:
      out.append('<%s%s/>' % (node.name, attrs))
      continue
    inner = serialize(node.children)
    # a newline right after <pre> is swallowed by HTML parsers
    if node.name == 'pre' and inner.startswith('\n'):
      inner = '\n' + inner
    out.append('<%s%s>%s</%s>' % (node.name, attrs, inner, node.name))
  return ''.join(out)

class Html:
  """Sanitize an HTML fragment, URLs are made absolute using base_url"""
  tables = ['tag_whitelist', 'tag_blacklist', 'attribute_whitelist',
            'scheme_whitelist', 'embed_whitelist', 'media_blacklist',
            'integer_attributes', 'required_attributes', 'add_attributes']

  def __init__(self, html, base_url='', config=None):
    self.html = html or ''
    self.base_url = base_url or ''
    config = config or param.Config()
    for name in self.tables:
      setattr(self, name, config.table(name))

  def execute(self):
    if not self.html.strip():
      return ''
    tree = html5lib.parse(self.html, treebuilder='etree',
                          namespaceHTMLElements=False)
    body = tree.find('body')
    if body is None:
      return ''
    nodes = self.cleanup(self.filter_children(body, 0), False)
    return serialize(nodes).strip()

  ######################################################################
  # whitelisting, top-down
  def filter_children(self, element, depth):
    out = []
    for child in children(element):
      if isinstance(child, str):
        out.append(child)
      else:
        out.extend(self.filter_element(child, depth))
    return out

  def filter_element(self, element, depth):
    """Return the nodes replacing element in the sanitized tree"""
    name = element.tag
    # comments and processing instructions
    if not isinstance(name, str):
      return []
    # SVG and MathML elements keep their namespace
    name = name.rsplit('}', 1)[-1].lower()
    if name in self.tag_blacklist or self.is_blacklisted(element.attrib):
      return []
    if name in embed_tags:
      return self.filter_embed(name, element.attrib)
    # the later passes recurse, the sanitized tree must stay shallow
    if depth >= max_depth:
      return [text_content(element, set(self.tag_blacklist) | embed_tags)]
    nodes = self.filter_children(element, depth + 1)
    if name not in self.tag_whitelist:
      return nodes
    attrs = self.filter_attributes(name, element.attrib)
    if attrs is None:
      return nodes
    tag = Tag(name, attrs)
    tag.children = nodes
    return [tag]

  def filter_embed(self, name, attributes):
    """Embeds are kept whole or not at all, their content is never shown"""
    if name not in self.tag_whitelist:
      return []
    attrs = self.filter_attributes(name, attributes)
    if attrs is None or not self.is_embed_allowed(attrs.get('src', '')):
      return []
    return [Tag(name, attrs)]

  def filter_attributes(self, name, attributes):
    """Return the attributes to keep, None if the element must go"""
    allowed = self.attribute_whitelist.get(name, ())
    attrs = {}
    for attr, value in attributes.items():
      if not isinstance(attr, str):
        continue
      attr = attr.lower()
      if attr not in allowed or attr in attrs:
        continue
      if attr in self.integer_attributes:
        value = value.strip()
        if not integer_re.match(value):
          continue
      if attr in url_attributes:
        value = self.filter_url(value)
        if value is None:
          return None
      attrs[attr] = value
    for attr in self.required_attributes.get(name, ()):
      if attr not in attrs:
        return None
    for attr, value in self.add_attributes.get(name, ()):
      attrs[attr] = value
    return attrs

  def filter_url(self, value):
    """Resolve an URL against the base, None if its scheme is not allowed
    or it cannot be parsed"""
    value = url_junk_re.sub('', value).strip()
    value = urls.resolve(value, self.base_url)
    if not urls.is_valid(value):
      return None
    scheme = urls.scheme(value)
    if scheme and scheme not in self.scheme_whitelist:
      return None
    return value

  def is_blacklisted(self, attributes):
    for attr, value in attributes.items():
      if attr in url_attributes:
        value = value.lower()
        for pattern in self.media_blacklist:
          if pattern in value:
            return True
    return False

  def is_embed_allowed(self, src):
    if urls.scheme(src) not in ('http', 'https'):
      return False
    host = urls.host(src)
    for allowed in self.embed_whitelist:
      if host == allowed or host.endswith('.' + allowed):
        return True
    return False

  ######################################################################
  # structural cleanup, bottom-up
  def cleanup(self, nodes, literal):
    out = []
    for node in nodes:
      if isinstance(node, str):
        out.append(node if literal else node.replace('\xa0', ' '))
        continue
      node.children = self.cleanup(node.children,
                                   literal or node.name in literal_tags)
      if not self.is_removable(node, literal):
        out.append(node)
    return out

  def is_removable(self, tag, literal):
    if literal or tag.name in void_tags or tag.name in media_tags:
      return False
    # removing a single empty cell would shift the columns
    if tag.name in cell_tags:
      return False
    if tag.name in literal_tags:
      return not tag.children
    if tag.name == 'tr':
      return not any(find_all(tag, cell_tags))
    if tag.name == 'table':
      return not any(has_content(cell) for cell in find_all(tag, cell_tags))
    return not has_content(tag)

def sanitize(html, base_url='', config=None):
  return Html(html, base_url, config).execute()
