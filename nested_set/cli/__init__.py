"""
Command line interface package.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""
