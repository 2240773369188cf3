"""Schema-driven content editor core and its Streamlit host screens."""
