########################################################################
#
# Parameter file for Tidings
#
########################################################################

# run the HTML sanitizer on item content, titles and descriptions
enable_filter = True

# replace item content with the full article scraped from the item URL
enable_grabber = False
# item URLs the content grabber should never fetch
grabber_ignore_urls = []

# hash algorithm used to generate item ids, anything hashlib.new() accepts
hash_algo = 'sha256'

# timezone used to interpret feed dates that carry no offset, and for the
# "now" fallback when a date cannot be parsed at all
timezone = 'UTC'

# URL to use as the User-Agent when downloading feeds
tidings_url = 'https://github.com/tidings/tidings'
# user agent shown when fetching feeds and scraping articles
user_agent = 'Tidings (%s)' % tidings_url

# default timeout for HTTP requests in seconds
http_timeout = 60.0

# diagnostics sink, any object with a write() method, e.g. sys.stderr
# None means diagnostics are discarded
log = None

settings = [
  'enable_filter', 'enable_grabber', 'grabber_ignore_urls', 'hash_algo',
  'timezone', 'user_agent', 'http_timeout', 'log',
  # callable(url, config) returning HTML or None, default grabber.grab
  'grabber',
  # HTML filter tables, default to the ones in htmlfilter.py
  'tag_whitelist', 'tag_blacklist', 'attribute_whitelist',
  'scheme_whitelist', 'embed_whitelist', 'media_blacklist',
  'integer_attributes', 'required_attributes', 'add_attributes',
]

class Config:
  """Settings for a parse session.

  Snapshots the module defaults above, keyword arguments override them.
  The core never modifies a Config, so one can be shared between threads.
  """
  def __init__(self, **kwargs):
    for name in settings:
      setattr(self, name, globals().get(name))
    for name, value in kwargs.items():
      if name not in settings:
        raise TypeError('unknown setting %r' % name)
      setattr(self, name, value)
    self.grabber_ignore_urls = list(self.grabber_ignore_urls or [])

  def __repr__(self):
    return '<Config %s>' % ' '.join(
      '%s=%r' % (name, getattr(self, name)) for name in settings
      if name not in ('log', 'grabber') and getattr(self, name) is not None)

  def table(self, name):
    """Return an HTML filter table, the config override or the default"""
    value = getattr(self, name, None)
    if value is None:
      from . import htmlfilter
      value = getattr(htmlfilter, name)
    return value
