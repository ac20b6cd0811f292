# Character set handling for feed documents: find the declared encoding,
# convert to Unicode, then scrub what the XML parser would choke on
import re, codecs
import html.entities as htmlentitydefs
from . import util

class UnresolvableEncoding(LookupError):
  pass

xml_tag_re = re.compile(r'^\s*<\?xml\b[^>]*?\?>', re.IGNORECASE)
xml_encoding_re = re.compile(
  r'<\?xml\b[^>]*?\bencoding\s*=\s*["\']([A-Za-z0-9._:-]+)["\']',
  re.IGNORECASE)

boms = [
  # longest first, the UTF-32 LE BOM starts with the UTF-16 LE one
  (codecs.BOM_UTF32_LE, 'utf-32-le'),
  (codecs.BOM_UTF32_BE, 'utf-32-be'),
  (codecs.BOM_UTF8, 'utf-8'),
  (codecs.BOM_UTF16_LE, 'utf-16-le'),
  (codecs.BOM_UTF16_BE, 'utf-16-be'),
]

def get_bom_encoding(content):
  if isinstance(content, bytes):
    for bom, name in boms:
      if content.startswith(bom):
        return name, content[len(bom):]
  return None, content

def get_xml_encoding(content):
  """Return the encoding declared in the XML prolog, or ''"""
  if isinstance(content, bytes):
    # the prolog is ASCII-compatible in any encoding we can sniff this way
    content = content[:1024].decode('latin-1')
  m = xml_encoding_re.search(content[:1024])
  return m.group(1).lower() if m else ''

def lookup(name):
  try:
    return codecs.lookup(name).name
  except (LookupError, TypeError):
    raise UnresolvableEncoding(name)

def convert(content, encoding, config=None):
  """Decode bytes to str, an unknown encoding falls back to UTF-8"""
  if isinstance(content, str):
    return content
  try:
    name = lookup(encoding or 'utf-8')
  except UnresolvableEncoding:
    util.log(config, 'encoding: unknown encoding %r, using UTF-8' % encoding)
    name = 'utf-8'
  # UTF-16/32 declarations without a BOM are usually lies
  if name.startswith('utf-16') or name.startswith('utf-32'):
    if b'\0' not in content[:256]:
      name = 'utf-8'
  return content.decode(name, 'replace')

def strip_xml_tag(content):
  """Remove the XML declaration, it no longer describes the decoded text"""
  return xml_tag_re.sub('', content, count=1)

# control characters are illegal in XML 1.0, even as character references
control_re = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\ufffe\uffff]')
bad_ref_re = re.compile(
  r'&#(?:0*(?:[0-8]|1[124-9]|2[0-9]|3[01]|127)|x0*(?:[0-8bcef]|1[0-9a-f]|7f));',
  re.IGNORECASE)
double_ref_re = re.compile(r'&amp;(#[0-9]+|#x[0-9a-f]+);', re.IGNORECASE)

# HTML entities are undefined in XML unless a DTD says otherwise
ent_re = re.compile(r'&([A-Za-z][A-Za-z0-9]*);')
xml_entities = set(['amp', 'lt', 'gt', 'quot', 'apos'])
def ent_sub(m):
  ent = m.group(1)
  if ent in xml_entities or ent not in htmlentitydefs.name2codepoint:
    return m.group(0)
  return '&#%d;' % htmlentitydefs.name2codepoint[ent]

def normalize_data(content):
  """Workarounds for common breakage in the wild"""
  content = control_re.sub('', content)
  content = bad_ref_re.sub('', content)
  content = double_ref_re.sub(r'&\1;', content)
  content = ent_re.sub(ent_sub, content)
  return content

def decode(content, http_encoding='', config=None):
  """Turn a raw feed document into clean Unicode text without XML prolog.

  A byte-order mark wins over everything, then the encoding declared in the
  XML prolog, then the transport-supplied one, then UTF-8.
  """
  bom_encoding, content = get_bom_encoding(content)
  xml_encoding = get_xml_encoding(content)
  util.log(config, 'encoding: HTTP encoding %r ; XML encoding %r' % (
    http_encoding, xml_encoding))
  content = convert(content, bom_encoding or xml_encoding or http_encoding,
                    config)
  content = content.lstrip('\ufeff')
  return normalize_data(strip_xml_tag(content))
