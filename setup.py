"""Renders one access log line per HTTP request, from a compact
format string like ``"{real-ip} {method} {uri} {status} {latency}"``,
with WSGI middleware and simple emitters included.

BSD-licensed.
"""

from setuptools import setup, find_packages


__version__ = '0.1.0'
__license__ = 'BSD'

desc = ('Compact, compiled format strings for HTTP access logs.')


setup(name='accesslog',
      version=__version__,
      description=desc,
      long_description=__doc__,
      packages=find_packages(),
      install_requires=['boltons>=20.0.0'],
      extras_require={'test': ['pytest']},
      python_requires='>=3.7',
      include_package_data=True,
      zip_safe=False,
      license=__license__,
      platforms='any',
      classifiers=[
          'Intended Audience :: Developers',
          'Topic :: System :: Logging',
          'Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware',
          'License :: OSI Approved :: BSD License',
          'Programming Language :: Python :: 3',
          'Programming Language :: Python :: Implementation :: CPython',
          'Programming Language :: Python :: Implementation :: PyPy',
      ]
)
