import setuptools

with open("README.md", "r") as fh:
  long_description = fh.read()

setuptools.setup(
  name='tidings',
  author='Tidings contributors',
  version='1.0.0',
  url='https://github.com/tidings/tidings',
  packages=['tidings'],
  include_package_data=True,
  install_requires=[
    'requests',
    'html5lib>=1.1',
    'feedparser>=6.0.2',
    'bleach>=6.0',
    'lxml>=4.6',
    'tzdata',
  ],
  extras_require={
    'test': ['pytest>=7'],
  },
  description='RSS/Atom feed parser with a whitelist HTML sanitizer.',
  long_description=long_description,
  long_description_content_type='text/markdown',
  classifiers=[
    'License :: OSI Approved :: BSD License',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3.9',
    'Programming Language :: Python :: 3.11',
  ],
)
