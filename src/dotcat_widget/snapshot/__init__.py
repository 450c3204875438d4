"""
Widget snapshot subsystem.

Components:
- snapshot_models.py: data structures (WidgetTask, TaskSnapshot) + JSON codec
- snapshot_store.py: SQLite-backed key/value store shared by app and widgets
- snapshot_writer.py: app-side recompute + publish (ordering, pending count, timestamps)
- snapshot_reader.py: widget-side load + bounded RenderModel derivation
- refresh_scheduler.py: refresh cadence policy + optional polling drivers
- category_styles.py: category -> icon/color lookup with fallback
- snapshot_api.py: small high-level helpers used by the rest of the app
"""
