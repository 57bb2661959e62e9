# routers/__init__.py
#
# One APIRouter per resource; main.create_app() includes them individually.
