"""CheckMate attendance package.

Organized by feature modules (geo, people, attendance, notifications) with a
thin Flask controller layer on top of service/repository layers.
"""
