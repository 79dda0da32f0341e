"""Markdown documentation pages built from module configuration schemas."""