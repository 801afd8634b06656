"""Todo Dashboard package.

This package contains the pieces behind the Streamlit dashboard:
- A thin HTTP client for the remote todo API (auth + todo CRUD).
- The per-session todo state that mirrors server acknowledgements.
- Pure role/tab visibility, filtering and derived statistics.
"""

__version__ = "0.1.0"
