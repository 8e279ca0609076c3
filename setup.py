"""
Setup file.
"""

import os

from setuptools import setup

KEYWORDS = "css lightningcss watch watchman fswatch inotify bundler minify"
HERE = os.path.dirname(os.path.abspath(__file__))



if __name__ == "__main__":
    setup(
        maintainer="Zachary Vorhies",
        keywords=KEYWORDS,
        include_package_data=True)
