"""
Repositories behind the message store and registry collaborators.

Every method takes an open aiosqlite connection; the service owns
transactions. Rows are mapped to the frozen record types in
``modconsole.datatypes`` by ``row_codecs``.
"""
