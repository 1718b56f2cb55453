from .param_serializer import ParamSpec, DATASET_PARAMS, BOOSTER_PARAMS, INDEX_PARAMS, stringify_params

__all__ = ['ParamSpec', 'DATASET_PARAMS', 'BOOSTER_PARAMS', 'INDEX_PARAMS', 'stringify_params']
