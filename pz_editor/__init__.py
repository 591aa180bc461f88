"""
PZ Editor Application
=====================

Application layer over pz_core: the FastAPI service (``pz_editor.api``)
and the ``pz-xml`` command line tool (``pz_editor.cli``).
"""
