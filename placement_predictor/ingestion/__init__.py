"""
Ingestion layer — turns uploaded files into validated training records.

Submodules:
  training_csv — CSV parser for labeled training uploads + sample template
"""
