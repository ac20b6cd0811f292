#!/usr/bin/env python3
import os, io, time, calendar, hashlib, unittest
from unittest import mock
from tidings import parser, atom, rss, param

def fixture(name):
  with open(os.path.join(os.path.dirname(__file__), 'fixtures', name),
            'rb') as f:
    return f.read()

def sha256(*parts):
  return hashlib.sha256(''.join(parts).encode('utf-8')).hexdigest()

class TestCase(unittest.TestCase):
  def test100_atom(self):
    feed = parser.execute(atom.Atom(), fixture('atom.xml'))
    assert feed.title == 'Example Feed'
    assert feed.description == 'A subtitle.'
    assert feed.feed_url == 'http://example.org/feed/'
    assert feed.site_url == 'http://example.org/'
    assert feed.id == 'urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6'
    assert feed.language == 'en-US'
    assert feed.logo_url == 'http://example.org/logo.png'
    assert feed.date == calendar.timegm((2003, 12, 13, 18, 30, 2))
    assert len(feed.get_items()) == 3

  def test101_atom_items(self):
    items = atom.Atom().execute(fixture('atom.xml')).items
    item = items[0]
    assert item.title == 'Atom-Powered Robots Run Amok'
    assert item.url == 'http://example.org/2003/12/13/atom03'
    assert item.id == sha256('urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a')
    # published wins over updated
    assert item.date == calendar.timegm((2003, 12, 13, 18, 30, 2))
    assert item.author == 'John Doe'
    assert item.content == '<p>Some text.</p>'
    assert item.enclosure_url == 'http://example.org/podcast/episode1.mp3'
    assert item.enclosure_type == 'audio/mpeg'
    assert item.language == 'en-US'
    assert not item.is_rtl()
    item = items[1]
    assert item.title == 'Second entry'
    assert item.url == 'http://example.org/2003/12/14/second'
    assert item.author == 'Jane'
    assert item.date == calendar.timegm((2003, 12, 14, 17, 30, 2))
    assert item.content == '<p>Hello <em>world</em></p>'
    assert item.enclosure_url == ''
    assert item.language == 'ar'
    assert item.is_rtl()
    item = items[2]
    assert item.url == 'http://example.org/2003/12/15/third'
    assert item.content == 'Just a summary'
    assert item.date == calendar.timegm((2003, 12, 15, 0, 0, 0))

  def test102_rss20(self):
    feed = parser.execute(rss.Rss20(), fixture('rss20.xml'))
    assert feed.title == 'Example &amp; News'
    assert feed.description == 'Latest news'
    assert feed.feed_url == 'http://www.example.com/rss.xml'
    assert feed.site_url == 'http://www.example.com/'
    assert feed.language == 'fr-FR'
    assert feed.logo_url == 'http://www.example.com/logo.png'
    assert feed.date == calendar.timegm((2003, 6, 10, 9, 41, 1))
    assert feed.id == ''
    assert len(feed.items) == 3

  def test103_rss20_items(self):
    before = int(time.time())
    items = parser.execute(rss.Rss20(), fixture('rss20.xml')).items
    after = int(time.time())
    item = items[0]
    assert item.title == 'Star City'
    assert item.url == 'http://www.example.com/news/star-city'
    assert item.id == sha256('http://www.example.com/2003/06/03.html#item573')
    assert item.author == 'Jules'
    assert item.date == calendar.timegm((2003, 6, 3, 9, 39, 21))
    assert item.content.startswith('How do Americans get ready')
    assert item.language == 'fr-FR'
    item = items[1]
    assert item.title == 'Relative &amp; friends'
    assert item.url == 'http://www.example.com/news/relative'
    # no guid, the id comes from the URL
    assert item.id == sha256('http://www.example.com/news/relative')
    assert item.author == 'editor@example.com (Editor)'
    assert item.date == calendar.timegm((2003, 5, 30, 9, 6, 42))
    assert item.content == '<p>Full <a href="http://www.example.com/about" rel="noreferrer" target="_blank">content</a></p>'
    assert item.enclosure_url == 'http://www.example.com/mp3s/ep1.mp3'
    assert item.enclosure_type == 'audio/mpeg'
    item = items[2]
    # no link, the URL defaults to the site's and the id hashes the
    # unfiltered title and content
    assert item.url == 'http://www.example.com/'
    assert item.id == sha256('No link', 'Only text')
    assert before <= item.date <= after

  def test104_rss10(self):
    feed = parser.execute(rss.Rss10(), fixture('rss10.xml'),
                          fallback_url='http://xml.com/news.rss')
    assert feed.title == 'XML.com'
    assert feed.feed_url == 'http://xml.com/news.rss'
    assert feed.site_url == 'http://xml.com/pub'
    assert feed.language == 'en-us'
    assert feed.logo_url == 'http://xml.com/universal/images/xml_tiny.gif'
    assert feed.date == calendar.timegm((2000, 1, 1, 12, 0, 0))
    assert len(feed.items) == 2
    item = feed.items[0]
    assert item.title == 'Processing Inclusions with XSLT'
    assert item.url == 'http://xml.com/pub/2000/08/09/xslt/xslt.html'
    assert item.id == sha256(item.url)
    assert item.author == 'Bob'
    assert item.date == calendar.timegm((2000, 8, 9, 8, 0, 0))
    assert item.language == 'en-us'
    item = feed.items[1]
    # no link, rdf:about is used instead
    assert item.url == 'http://xml.com/pub/2000/08/09/rdfdb/index.html'
    assert item.author == ''

  def test105_rss90(self):
    data = '''<?xml version="1.0"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#" xmlns="http://my.netscape.com/rdf/simple/0.9/">
  <channel>
    <title>Mozilla Dot Org</title>
    <link>http://www.mozilla.org</link>
    <description>the Mozilla Organization web site</description>
  </channel>
  <item>
    <title>New Status Updates</title>
    <link>http://www.mozilla.org/status/</link>
  </item>
</rdf:RDF>'''
    feed = parser.execute(rss.Rss90(), data)
    assert feed.title == 'Mozilla Dot Org'
    assert feed.site_url == 'http://www.mozilla.org'
    assert [i.url for i in feed.items] == ['http://www.mozilla.org/status/']

  def test106_rss91_latin1(self):
    feed = parser.execute(rss.Rss91(), fixture('latin1.xml'))
    assert feed.title == 'Caf\xe9 \xe9t\xe9'
    item = feed.items[0]
    assert item.title == 'Cr\xe8me br\xfbl\xe9e'
    assert item.content == 'Tr\xe8s bon !'

  def test107_fallback_urls(self):
    data = '<rss version="2.0"><channel><title></title><item><title>t</title><link>/a</link></item></channel></rss>'
    feed = parser.execute(rss.Rss20(), data,
                          fallback_url='http://host.example/path/feed.xml')
    assert feed.feed_url == 'http://host.example/path/feed.xml'
    assert feed.site_url == 'http://host.example'
    assert feed.title == 'http://host.example'
    assert feed.items[0].url == 'http://host.example/a'

  def test108_item_title_fallback(self):
    data = '<rss version="2.0"><channel><link>http://h.example/</link><item><link>http://h.example/x</link></item></channel></rss>'
    feed = parser.execute(rss.Rss20(), data)
    assert feed.items[0].title == 'http://h.example/x'

  def test109_malformed(self):
    for data in ['this is not xml', '', b'\x00\x01']:
      with self.assertRaises(parser.MalformedDocument):
        parser.execute(rss.Rss20(), data)

  def test110_recover(self):
    data = '<rss version="2.0"><channel><title>Broken</title><item><title>x</title><link>http://b.example/1</link></item></channel>'
    feed = parser.execute(rss.Rss20(), data)
    assert feed.title == 'Broken'
    assert [i.url for i in feed.items] == ['http://b.example/1']

  def test111_filter_disabled(self):
    config = param.Config(enable_filter=False)
    items = parser.execute(rss.Rss20(), fixture('rss20.xml'), config=config).items
    assert items[1].title == 'Relative & friends'
    assert items[1].content.startswith('<p>Full <a href="/about">content</a></p>')
    assert 'feedburner' in items[1].content

  def test112_grabber(self):
    calls = []
    def grab(url, config):
      calls.append(url)
      return '<p>Full article<script>x</script> <a href="/more">more</a></p>'
    config = param.Config(enable_grabber=True, grabber=grab)
    items = parser.execute(rss.Rss20(), fixture('rss20.xml'), config=config).items
    assert calls == ['http://www.example.com/news/star-city',
                     'http://www.example.com/news/relative',
                     'http://www.example.com/']
    # grabbed content is filtered with the item URL as base
    assert items[0].content == '<p>Full article <a href="http://www.example.com/more" rel="noreferrer" target="_blank">more</a></p>'

  def test113_grabber_disabled(self):
    def grab(url, config):
      raise AssertionError('grabber called')
    config = param.Config(grabber=grab)
    feed = parser.execute(rss.Rss20(), fixture('rss20.xml'), config=config)
    assert len(feed.items) == 3

  def test114_grabber_failure(self):
    def grab(url, config):
      if url.endswith('star-city'):
        raise ValueError('no content')
      return None
    log = io.StringIO()
    config = param.Config(enable_grabber=True, grabber=grab, log=log)
    items = parser.execute(rss.Rss20(), fixture('rss20.xml'), config=config).items
    assert items[0].content.startswith('How do Americans get ready')
    assert items[1].content.startswith('<p>Full <a')
    assert 'ValueError' in log.getvalue()

  def test115_grabber_ignore(self):
    calls = []
    def grab(url, config):
      calls.append(url)
      return '<p>grabbed</p>'
    config = param.Config(enable_grabber=True, grabber=grab,
                          grabber_ignore_urls=[
                            'HTTP://WWW.example.com/news/star-city#top'])
    items = parser.execute(rss.Rss20(), fixture('rss20.xml'), config=config).items
    assert 'http://www.example.com/news/star-city' not in calls
    assert items[0].content.startswith('How do Americans')
    assert items[1].content == '<p>grabbed</p>'

  def test116_hash_algo(self):
    config = param.Config(hash_algo='md5')
    item = parser.execute(rss.Rss20(), fixture('rss20.xml'), config=config).items[0]
    assert item.id == hashlib.md5(
      b'http://www.example.com/2003/06/03.html#item573').hexdigest()
    config = param.Config(hash_algo='no-such-hash')
    item = parser.execute(rss.Rss20(), fixture('rss20.xml'), config=config).items[0]
    assert item.id == sha256('http://www.example.com/2003/06/03.html#item573')

  def test117_ids_are_stable(self):
    ids = [[i.id for i in parser.execute(rss.Rss20(), fixture('rss20.xml')).items]
           for n in range(2)]
    assert ids[0] == ids[1]
    assert len(set(ids[0])) == 3

  def test118_timezone(self):
    data = '<rss version="2.0"><channel><link>http://h.example/</link><item><link>http://h.example/x</link><pubDate>2014-01-02 10:00:00</pubDate></item></channel></rss>'
    utc = parser.execute(rss.Rss20(), data).items[0].date
    assert utc == calendar.timegm((2014, 1, 2, 10, 0, 0))
    paris = parser.execute(rss.Rss20(), data,
                           config=param.Config(timezone='Europe/Paris'))
    assert paris.items[0].date == utc - 3600

  def test119_failing_hook(self):
    class Broken(rss.Rss20):
      def find_item_author(self, xml, entry):
        raise KeyError('author')
    log = io.StringIO()
    feed = parser.execute(Broken(), fixture('rss20.xml'),
                          config=param.Config(log=log))
    assert [i.author for i in feed.items] == ['', '', '']
    assert 'BEGIN' in log.getvalue() and 'KeyError' in log.getvalue()

  def test120_logging(self):
    log = io.StringIO()
    parser.execute(rss.Rss20(), fixture('rss20.xml'),
                   config=param.Config(log=log))
    out = log.getvalue()
    assert 'Rss20: begin parsing' in out
    assert "XML encoding 'utf-8'" in out
    assert 'Feed::title = Example &amp; News' in out
    assert 'Item::url = http://www.example.com/news/star-city' in out

  def test121_entities(self):
    data = '<rss version="2.0"><channel><title>&eacute;t&eacute; &amp;#233; &#1;</title><link>http://h.example/</link></channel></rss>'
    feed = parser.execute(rss.Rss20(), data)
    assert feed.title == '\xe9t\xe9 \xe9'

  def test122_no_entity_expansion(self):
    data = '''<?xml version="1.0"?>
<!DOCTYPE rss [<!ENTITY xxe SYSTEM "file:///etc/passwd">]>
<rss version="2.0"><channel><title>a&xxe;b</title><link>http://h.example/</link></channel></rss>'''
    feed = parser.execute(rss.Rss20(), data)
    assert 'root:' not in feed.title

  def test123_generate_id(self):
    assert parser.generate_id('a', 'b') == parser.generate_id('a', 'b')
    assert parser.generate_id('a', 'b') != parser.generate_id('b', 'a')
    assert parser.generate_id('ab') == sha256('ab')
    assert len(parser.generate_id('x', hash_algo='sha1')) == 40

  def test124_broken_urls(self):
    data = '''<rss version="2.0"><channel><link>http://h.example/</link>
<item><title>one</title><link>http://h.example/1</link><description>&lt;p&gt;&lt;a href="//[x"&gt;x&lt;/a&gt;&lt;/p&gt;</description></item>
<item><title>two</title><link>//[bad</link></item>
</channel></rss>'''
    items = parser.execute(rss.Rss20(), data).items
    assert len(items) == 2
    assert items[0].content == '<p>x</p>'
    assert items[1].title == 'two'
    assert items[1].url == '//[bad'

  def test125_deep_nesting(self):
    data = '<rss version="2.0"><channel><link>http://h.example/</link><item><link>http://h.example/1</link><description><![CDATA[' + '<div>' * 600 + 'x]]></description></item></channel></rss>'
    items = parser.execute(rss.Rss20(), data).items
    assert items[0].content == 'x'

  def test126_filter_failure(self):
    log = io.StringIO()
    config = param.Config(log=log)
    with mock.patch('tidings.htmlfilter.sanitize',
                    side_effect=RecursionError('too deep')):
      items = parser.execute(rss.Rss20(), fixture('rss20.xml'),
                             config=config).items
    assert len(items) == 3
    assert items[1].content.startswith('Full content')
    assert '<' not in items[1].content
    assert 'RecursionError' in log.getvalue()

  def test127_site_url_base(self):
    data = '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom"><channel><link>/blog/</link><atom:link rel="self" href="http://mirror.example/feed"/></channel></rss>'
    feed = parser.execute(rss.Rss20(), data,
                          fallback_url='http://real.example/rss')
    assert feed.feed_url == 'http://mirror.example/feed'
    assert feed.site_url == 'http://real.example/blog/'
    feed = parser.execute(rss.Rss20(), data)
    assert feed.site_url == 'http://mirror.example/blog/'

def suite():
  return unittest.defaultTestLoader.loadTestsFromTestCase(TestCase)

if __name__ == '__main__':
  unittest.main()
