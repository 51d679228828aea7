"""Unified command-line interface for tabsplit.

Usage:
    tabsplit order "Timo en Bart een biertje en pizza" [--people Timo,Bart]
    tabsplit receipt <file>
    tabsplit split <file> --order "Timo 2 bier" [--tip-percent 10]
    tabsplit serve [--host] [--port]
"""
