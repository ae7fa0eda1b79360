"""
Core package: configuration, constants, exceptions and the bridge client.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""
