# web/fastapi_registry.py
"""
Routers CRUD genéricos para cada tabla expuesta por la API de datos.

Cada operación pasa por la política de filas del modelo
(``app_core.policies``): ``scope`` filtra lo que el actor puede leer,
modificar o borrar y ``check`` valida la fila que se va a escribir.
Las claves foráneas viajan con el nombre de su columna (``movie_id``,
``screening_id``...) y se pueden expandir por nombre de relación
(``expand=screening.movie``).
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type
from datetime import date, datetime
import importlib
import uuid
import warnings

from fastapi import APIRouter, HTTPException, Query, Depends, status
from pydantic import BaseModel, create_model, ConfigDict

from django.conf import settings
from django.db import models as dm
from django.db.models import Model, Q
from django.db import transaction
from django.core.exceptions import FieldDoesNotExist, ObjectDoesNotExist

from app_core.policies import policy_for


# ============================================================
# Mapear tipos Django -> tipos Python/Pydantic
# ============================================================

def _py_type_for_field(f: dm.Field) -> type:
    """Mapea un campo Django a tipo Python apropiado para Pydantic."""
    # FK / OneToOne: usar el tipo del campo target (pk remoto)
    if isinstance(f, dm.ForeignKey):
        return _py_type_for_field(f.target_field)
    # Números
    if isinstance(f, (dm.AutoField, dm.BigAutoField, dm.IntegerField)):
        return int
    if isinstance(f, dm.UUIDField):
        return uuid.UUID
    if isinstance(f, dm.BooleanField):
        return bool
    if isinstance(f, (dm.DecimalField, dm.FloatField)):
        return float
    # Fechas/horas
    if isinstance(f, dm.DateTimeField):
        return datetime
    if isinstance(f, dm.DateField):
        return date
    if isinstance(f, dm.JSONField):
        return dict
    # Por defecto: strings (Char/Text/Slug/Email/URL, etc.)
    return str


def _api_name(f: dm.Field) -> str:
    """Nombre público del campo: columna para FKs, nombre para el resto."""
    return f.column if isinstance(f, dm.ForeignKey) else f.name


def _is_writable(f: dm.Field) -> bool:
    """True si el campo es editable por el usuario (no auto ni read-only)."""
    return getattr(f, "editable", True) and not f.primary_key


def _concrete_fields(model: Type[Model]) -> List[dm.Field]:
    # Solo campos concretos; sin relaciones reverse ni M2M
    return [f for f in model._meta.concrete_fields]


# ============================================================
# Generación de esquemas Pydantic (Entrada/Salida)
# ============================================================

def make_schemas(
    model: Type[Model],
    *,
    include: Optional[Iterable[str]] = None,
    exclude: Optional[Iterable[str]] = None,
    readonly: Optional[Iterable[str]] = None,
) -> Tuple[Type[BaseModel], Type[BaseModel]]:
    include = set(include or [])
    exclude = set(exclude or [])
    readonly = set(readonly or [])

    def listed(f, names):
        return f.name in names or _api_name(f) in names

    fields = _concrete_fields(model)
    if include:
        fields = [f for f in fields if listed(f, include) or f.primary_key]
    if exclude:
        fields = [f for f in fields if not listed(f, exclude)]

    in_fields: Dict[str, Tuple[type, Any]] = {}
    out_fields: Dict[str, Tuple[type, Any]] = {}

    for f in fields:
        name = _api_name(f)
        typ = _py_type_for_field(f)
        nullable = getattr(f, "null", False)
        out_fields[name] = (Optional[typ] if nullable or f.primary_key else typ, None)

        if listed(f, readonly) or not _is_writable(f):
            continue
        # Con default o blank el campo es opcional en la entrada
        optional = nullable or getattr(f, "blank", False) or f.has_default()
        in_fields[name] = (Optional[typ], None) if optional else (typ, ...)

    prefix = model.__name__

    InputModel = create_model(
        f"{prefix}In",
        __base__=BaseModel,
        __module__=__name__,
        **in_fields,
    )

    # base con config para salida (Pydantic v2) y expansiones extra
    ConfigBase = type(
        f"{prefix}OutBase",
        (BaseModel,),
        {"model_config": ConfigDict(from_attributes=True, extra="allow")},
    )

    OutputModel = create_model(
        f"{prefix}Out",
        __base__=ConfigBase,
        __module__=__name__,
        **out_fields,
    )

    InputModel.model_rebuild(force=True)
    OutputModel.model_rebuild(force=True)

    return InputModel, OutputModel


def partial_schema(schema: Type[BaseModel]) -> Type[BaseModel]:
    """Copia de ``schema`` con todos los campos opcionales (PATCH)."""
    fields = {name: (Optional[f.annotation], None) for name, f in schema.model_fields.items()}
    return create_model(f"{schema.__name__}Patch", __base__=BaseModel, __module__=__name__, **fields)


# ============================================================
# Opciones por modelo
# ============================================================

class ModelOptions(BaseModel):
    include: Optional[List[str]] = None
    exclude: Optional[List[str]] = None
    readonly: Optional[List[str]] = None
    search_fields: Optional[List[str]] = None
    default_order: Optional[str] = None
    methods: List[str] = ["GET", "POST", "PUT", "PATCH", "DELETE"]

    # Expansiones
    expand_allowed: Optional[List[str]] = None
    expand_default: Optional[List[str]] = None
    expand_max_depth: int = 2


def _get_model_opts(model_cls: Type[Model]) -> ModelOptions:
    cfg = getattr(settings, "GENERIC_API", {}) or {}
    per_model = cfg.get("MODEL_OPTIONS", {}) or {}
    raw = dict(per_model.get(model_cls._meta.label, {}) or {})
    raw["exclude"] = list(set(raw.get("exclude", []) + (cfg.get("GLOBAL_EXCLUDE_FIELDS", []) or [])))
    raw["methods"] = [m.upper() for m in raw.get("methods", ModelOptions.model_fields["methods"].default)]
    return ModelOptions(**raw)


# ============================================================
# Búsqueda, filtros, orden
# ============================================================

def _lookup_names(model: Type[Model]) -> Dict[str, str]:
    """Nombre público -> nombre usable en lookups del ORM."""
    return {_api_name(f): f.name for f in _concrete_fields(model)}


def _default_search_fields(model: Type[Model]) -> List[str]:
    names = [
        f.name for f in _concrete_fields(model)
        if isinstance(f, (dm.CharField, dm.TextField)) and not f.choices
    ]
    return names[:5]


def _apply_search(qs, q: Optional[str], search_fields: Optional[List[str]]):
    if q and search_fields:
        cond = Q()
        for f in search_fields:
            cond |= Q(**{f"{f}__icontains": q})
        qs = qs.filter(cond)
    return qs


def _apply_filters(qs, filters: List[str], lookups: Dict[str, str]):
    for expr in filters:
        if "=" not in expr:
            continue
        k, v = expr.split("=", 1)
        field, _, suffix = k.partition("__")
        if field not in lookups:
            raise HTTPException(status_code=400, detail=f"Unknown filter field '{field}'")
        key = lookups[field] + (f"__{suffix}" if suffix else "")
        qs = qs.filter(**{key: None if v == "null" else v})
    return qs


def _apply_order(qs, order: Optional[str], lookups: Dict[str, str]):
    desc = order.startswith("-")
    field = order.lstrip("-")
    if field not in lookups:
        raise HTTPException(status_code=400, detail=f"Unknown order field '{field}'")
    return qs.order_by(("-" if desc else "") + lookups[field])


# ============================================================
# Expansiones (expand=foo&expand=bar.baz)
# ============================================================

def _parse_expand(paths: List[str]) -> Dict[str, dict]:
    """
    Convierte ["screening.movie", "user"] en:
    {"screening": {"movie": {}}, "user": {}}
    """
    tree: Dict[str, dict] = {}
    for p in paths:
        cur = tree
        for part in filter(None, p.split(".")):
            cur = cur.setdefault(part, {})
    return tree


def _prune_expand(tree: Dict[str, dict], allowed: Optional[List[str]], max_depth: int) -> Dict[str, dict]:
    """Solo se expanden rutas declaradas en expand_allowed."""
    if not tree or not allowed:
        return {}
    allowed = set(allowed)

    def dfs(node: Dict[str, dict], prefix: str, depth: int) -> Dict[str, dict]:
        if depth > max_depth:
            return {}
        out = {}
        for key, sub in node.items():
            full = f"{prefix}.{key}" if prefix else key
            if any(full == a or a.startswith(full + ".") for a in allowed):
                out[key] = dfs(sub, full, depth + 1)
        return out

    return dfs(tree, "", 1)


# ============================================================
# Serialización
# ============================================================

def _build_out_data(obj: Model, OutSchema: Type[BaseModel]) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    by_api_name = {_api_name(f): f for f in _concrete_fields(type(obj))}
    for name in OutSchema.model_fields:
        f = by_api_name.get(name)
        data[name] = getattr(obj, f.attname) if f is not None else getattr(obj, name, None)
    return data


# Cache simple de OutSchemas por modelo
_SCHEMA_CACHE: Dict[Type[Model], Type[BaseModel]] = {}


def _get_out_schema_for(model_cls: Type[Model]) -> Type[BaseModel]:
    if model_cls in _SCHEMA_CACHE:
        return _SCHEMA_CACHE[model_cls]
    opts = _get_model_opts(model_cls)
    _, Out = make_schemas(model_cls, include=opts.include, exclude=opts.exclude, readonly=opts.readonly)
    _SCHEMA_CACHE[model_cls] = Out
    return Out


def _visible(actor, child: Optional[Model]) -> Optional[Model]:
    # Las filas embebidas pasan por la política de su propia tabla
    if child is None:
        return None
    return child if policy_for(type(child)).can_read(actor, child) else None


def _serialize_with_expand(obj: Optional[Model], base_out_schema: Type[BaseModel],
                           expand_tree: Dict[str, dict], actor) -> Any:
    if obj is None:
        return None

    data = _build_out_data(obj, base_out_schema)
    meta = obj._meta

    for name, sub_tree in expand_tree.items():
        # 1) Campo forward (FK, OneToOne)
        try:
            f = meta.get_field(name)
        except FieldDoesNotExist:
            continue

        if isinstance(f, dm.ForeignKey):
            child = _visible(actor, getattr(obj, name, None))
            data[name] = _serialize_with_expand(
                child, _get_out_schema_for(f.remote_field.model), sub_tree, actor
            )
        elif f.one_to_one and f.auto_created:
            # 2) OneToOne inverso (p. ej. user.profile)
            try:
                child = getattr(obj, f.get_accessor_name())
            except ObjectDoesNotExist:
                child = None
            data[name] = _serialize_with_expand(
                _visible(actor, child), _get_out_schema_for(f.related_model), sub_tree, actor
            )
        elif f.one_to_many and f.auto_created:
            # 3) Relación inversa (children)
            scoped = policy_for(f.related_model).scope(actor, getattr(obj, f.get_accessor_name()).all())
            child_out = _get_out_schema_for(f.related_model)
            data[name] = [_serialize_with_expand(c, child_out, sub_tree, actor) for c in scoped]
    return data


# ============================================================
# Router CRUD genérico
# ============================================================

def _anonymous_actor():
    return None


def _to_model_kwargs(model: Type[Model], payload: Dict[str, Any]) -> Dict[str, Any]:
    """Claves públicas -> attname del modelo (movie_id, scanned_by_id, ...)."""
    by_api_name = {_api_name(f): f for f in _concrete_fields(model)}
    return {by_api_name[k].attname: v for k, v in payload.items()}


def _forbidden():
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="New row violates row-level security policy",
    )


def build_router(
    model: Type[Model],
    opts: ModelOptions,
    auth_dependency: Optional[Callable] = None,
) -> APIRouter:
    InSchema, OutSchema = make_schemas(
        model,
        include=opts.include,
        exclude=opts.exclude,
        readonly=opts.readonly,
    )
    _SCHEMA_CACHE[model] = OutSchema
    PatchSchema = partial_schema(InSchema)

    table = model._meta.db_table
    r = APIRouter(prefix=f"/api/{table}", tags=[table])
    policy = policy_for(model)
    lookups = _lookup_names(model)
    actor_dep = auth_dependency or _anonymous_actor

    # Tipo dinámico de la pk
    pk_typ = _py_type_for_field(model._meta.pk)

    def expand_tree(expand: List[str]) -> Dict[str, dict]:
        tree = _parse_expand(list(opts.expand_default or []) + list(expand or []))
        return _prune_expand(tree, opts.expand_allowed, opts.expand_max_depth)

    def get_scoped(actor, pk) -> Model:
        try:
            return policy.scope(actor, model.objects.all()).get(pk=pk)
        except model.DoesNotExist:
            raise HTTPException(status_code=404, detail="Not found")

    def read_one(actor, pk, expand: List[str]):
        obj = get_scoped(actor, pk)
        return OutSchema(**_serialize_with_expand(obj, OutSchema, expand_tree(expand), actor))

    def save_checked(actor, obj: Model) -> None:
        if not policy.check(actor, obj):
            raise _forbidden()
        obj.full_clean()
        with transaction.atomic():
            obj.save()

    if "GET" in opts.methods:
        # ---- LIST (GET /)
        @r.get("/", response_model=List[OutSchema])  # type: ignore[valid-type]
        def list_items(
            q: Optional[str] = None,
            filters: List[str] = Query(default=[]),
            order: Optional[str] = None,
            limit: int = Query(50, ge=1, le=500),
            offset: int = Query(0, ge=0),
            expand: List[str] = Query(default=[]),
            actor=Depends(actor_dep),
        ):
            qs = policy.scope(actor, model.objects.all())
            qs = _apply_search(qs, q, opts.search_fields or _default_search_fields(model))
            qs = _apply_filters(qs, filters, lookups)
            if order:
                qs = _apply_order(qs, order, lookups)
            else:
                qs = qs.order_by(opts.default_order or model._meta.pk.name)

            tree = expand_tree(expand)
            return [
                OutSchema(**_serialize_with_expand(obj, OutSchema, tree, actor))
                for obj in qs[offset: offset + limit]
            ]

        # ---- RETRIEVE (GET /{pk})
        @r.get("/{pk}", response_model=OutSchema)
        def retrieve(pk: pk_typ, expand: List[str] = Query(default=[]), actor=Depends(actor_dep)):  # type: ignore[valid-type]
            return read_one(actor, pk, expand)

    if "POST" in opts.methods:
        # ---- CREATE (POST /)
        @r.post("/", response_model=OutSchema, status_code=201)
        def create(item: InSchema, actor=Depends(actor_dep)):  # type: ignore[valid-type]
            obj = model(**_to_model_kwargs(model, item.model_dump(exclude_unset=True)))
            save_checked(actor, obj)
            return read_one(actor, obj.pk, [])

    def update_common(pk, item: BaseModel, actor):
        obj = get_scoped(actor, pk)
        for k, v in _to_model_kwargs(model, item.model_dump(exclude_unset=True)).items():
            setattr(obj, k, v)
        save_checked(actor, obj)
        return read_one(actor, obj.pk, [])

    if "PUT" in opts.methods:
        @r.put("/{pk}", response_model=OutSchema)
        def update_put(pk: pk_typ, item: InSchema, actor=Depends(actor_dep)):  # type: ignore[valid-type]
            return update_common(pk, item, actor)

    if "PATCH" in opts.methods:
        @r.patch("/{pk}", response_model=OutSchema)
        def update_patch(pk: pk_typ, item: PatchSchema, actor=Depends(actor_dep)):  # type: ignore[valid-type]
            return update_common(pk, item, actor)

    if "DELETE" in opts.methods:
        @r.delete("/{pk}", status_code=204)
        def delete(pk: pk_typ, actor=Depends(actor_dep)):  # type: ignore[valid-type]
            deleted, _ = policy.scope(actor, model.objects.filter(pk=pk)).delete()
            if not deleted:
                raise HTTPException(status_code=404, detail="Not found")

    return r


# ============================================================
# Montaje desde settings
# ============================================================

def _load_auth_dependency() -> Optional[Callable]:
    path = (getattr(settings, "GENERIC_API", {}) or {}).get("AUTH_DEPENDENCY")
    if not path:
        warnings.warn("GENERIC_API has no AUTH_DEPENDENCY; every row will be hidden", RuntimeWarning)
        return None
    try:
        module_path, func_name = path.split(":")
        module = importlib.import_module(module_path)
        return getattr(module, func_name)
    except (ValueError, ImportError, AttributeError) as exc:
        warnings.warn(f"Could not load AUTH_DEPENDENCY '{path}': {exc}", RuntimeWarning)
        return None


def mount_from_settings(fastapi_app) -> None:
    """
    Monta routers para todos los modelos según settings.GENERIC_API.
    """
    cfg = getattr(settings, "GENERIC_API", {}) or {}

    allow_apps: Optional[List[str]] = cfg.get("APPS_ALLOWLIST")
    exclude_models = set(cfg.get("MODELS_EXCLUDE", []))

    auth_dep = _load_auth_dependency()

    from django.apps import apps as django_apps

    for model in django_apps.get_models():
        # filtra por apps
        if allow_apps and model._meta.app_label not in allow_apps:
            continue
        if model._meta.proxy or model._meta.label in exclude_models:
            continue

        fastapi_app.include_router(build_router(model, _get_model_opts(model), auth_dep))
