# presat_library/examples/__init__.py
# Runnable examples, e.g. python -m presat_library.examples.basic_presat_profile
