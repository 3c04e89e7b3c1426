"""Test fixtures for haru tests.

This module provides sample OpenAPI documents and helpers shared by the test
modules.
"""

import ast
import asyncio
import logging

from haru.core.schema import SchemaResolver
from haru.core.storage import SharedStorage
from haru.openapi import OpenAPI
from haru.plugins.backbone import BackbonePlugin
from haru.utils.dependencies import DependencyManager, PathManager

# Minimal OpenAPI 3.0 spec for basic testing
MINIMAL_OPENAPI_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Minimal API', 'version': '1.0.0'},
    'paths': {},
}

# Petstore-like API with models and multiple endpoints
PETSTORE_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Petstore API', 'version': '1.0.0'},
    'paths': {
        '/pets': {
            'get': {
                'operationId': 'listPets',
                'summary': 'List all pets',
                'tags': ['Pet'],
                'parameters': [
                    {
                        'name': 'limit',
                        'in': 'query',
                        'required': False,
                        'schema': {'type': 'integer', 'format': 'int32'},
                    }
                ],
                'responses': {
                    '200': {
                        'description': 'A list of pets',
                        'content': {
                            'application/json': {
                                'schema': {
                                    'type': 'array',
                                    'items': {'$ref': '#/components/schemas/Pet'},
                                }
                            }
                        },
                    }
                },
            },
            'post': {
                'operationId': 'createPet',
                'summary': 'Create a pet',
                'tags': ['Pet'],
                'requestBody': {
                    'required': True,
                    'content': {
                        'application/json': {
                            'schema': {'$ref': '#/components/schemas/Pet'}
                        }
                    },
                },
                'responses': {
                    '201': {
                        'description': 'Created',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Pet'}
                            }
                        },
                    },
                    'default': {
                        'description': 'Unexpected error',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Error'}
                            }
                        },
                    },
                },
            },
        },
        '/pets/{petId}': {
            'parameters': [
                {
                    'name': 'petId',
                    'in': 'path',
                    'required': True,
                    'schema': {'type': 'integer', 'format': 'int64'},
                }
            ],
            'get': {
                'operationId': 'getPetById',
                'summary': 'Info for a specific pet',
                'tags': ['Pet'],
                'responses': {
                    '200': {
                        'description': 'Expected response to a valid request',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Pet'}
                            }
                        },
                    },
                    '404': {
                        'description': 'Not found',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Error'}
                            }
                        },
                    },
                },
            },
            'delete': {
                'tags': ['Pet'],
                'responses': {'204': {'description': 'Deleted'}},
            },
        },
        '/store/inventory': {
            'get': {
                'operationId': 'getInventory',
                'responses': {
                    '200': {
                        'description': 'Inventory counts by status',
                        'content': {
                            'application/json': {
                                'schema': {
                                    'type': 'object',
                                    'additionalProperties': {'type': 'integer'},
                                }
                            }
                        },
                    }
                },
            }
        },
    },
    'components': {
        'schemas': {
            'NewPet': {
                'allOf': [
                    {'$ref': '#/components/schemas/Pet'},
                    {
                        'type': 'object',
                        'properties': {'owner-name': {'type': 'string'}},
                    },
                ]
            },
            'Pet': {
                'type': 'object',
                'description': 'A pet of the store',
                'required': ['id', 'name'],
                'properties': {
                    'id': {'type': 'integer', 'format': 'int64'},
                    'name': {'type': 'string'},
                    'tag': {'type': 'string'},
                    'status': {'$ref': '#/components/schemas/PetStatus'},
                },
            },
            'PetStatus': {
                'type': 'string',
                'enum': ['available', 'pending', 'sold'],
            },
            'PetList': {
                'type': 'array',
                'items': {'$ref': '#/components/schemas/Pet'},
            },
            'Error': {
                'type': 'object',
                'required': ['code', 'message'],
                'properties': {
                    'code': {'type': 'integer', 'format': 'int32'},
                    'message': {'type': 'string'},
                },
            },
        }
    },
}

# Request body properties named like the extra-options parameter
NAME_CLASH_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Name clash', 'version': '1.0.0'},
    'paths': {
        '/connect/NameClashEndpoint/getTwoParams': {
            'post': {
                'tags': ['NameClashEndpoint'],
                'operationId': 'NameClashEndpoint_getTwoParams_POST',
                'requestBody': {
                    'content': {
                        'application/json': {
                            'schema': {
                                'type': 'object',
                                'properties': {
                                    'init': {'type': 'string'},
                                    '_init': {'type': 'string'},
                                },
                            }
                        }
                    }
                },
                'responses': {
                    '200': {
                        'description': '',
                        'content': {
                            'application/json': {'schema': {'type': 'string'}}
                        },
                    }
                },
            }
        }
    },
}

# Request body without any properties
NO_PROPERTIES_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'No properties', 'version': '1.0.0'},
    'paths': {
        '/connect/NoPropertiesEndpoint/getData/{id}': {
            'post': {
                'tags': ['NoPropertiesEndpoint'],
                'operationId': 'NoPropertiesEndpoint_getData_POST',
                'parameters': [
                    {'name': 'id', 'in': 'path', 'required': True, 'schema': {'type': 'string'}}
                ],
                'requestBody': {
                    'content': {'application/json': {'schema': {'type': 'object'}}}
                },
                'responses': {'200': {'description': ''}},
            }
        }
    },
}

# Two operations of one tag deriving the same function name
DUPLICATE_NAME_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Duplicates', 'version': '1.0.0'},
    'paths': {
        '/a': {'get': {'tags': ['Api'], 'operationId': 'fetch', 'responses': {}}},
        '/b': {'get': {'tags': ['Api'], 'operationId': 'fetch', 'responses': {}}},
    },
}

# A response referencing a schema that does not exist
MISSING_REFERENCE_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Missing reference', 'version': '1.0.0'},
    'paths': {
        '/things': {
            'get': {
                'tags': ['Things'],
                'operationId': 'listThings',
                'responses': {
                    '200': {
                        'description': '',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Thing'}
                            }
                        },
                    }
                },
            }
        }
    },
    'components': {'schemas': {'Other': {'type': 'string'}}},
}


def many_operations_spec(count: int = 20) -> dict:
    """One tag, ``count`` operations, each referencing its own model."""
    paths = {}
    schemas = {}
    for index in range(count):
        paths[f'/items{index}/{{itemId}}'] = {
            'put': {
                'tags': ['Items'],
                'operationId': f'updateItem{index}',
                'parameters': [
                    {
                        'name': 'itemId',
                        'in': 'path',
                        'required': True,
                        'schema': {'type': 'string'},
                    },
                    {'name': 'dryRun', 'in': 'query', 'schema': {'type': 'boolean'}},
                ],
                'requestBody': {
                    'content': {
                        'application/json': {
                            'schema': {
                                'type': 'object',
                                'properties': {
                                    'payload': {
                                        '$ref': f'#/components/schemas/Item{index}'
                                    }
                                },
                            }
                        }
                    }
                },
                'responses': {
                    '200': {
                        'description': '',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': f'#/components/schemas/Item{index}'}
                            }
                        },
                    }
                },
            }
        }
        schemas[f'Item{index}'] = {
            'type': 'object',
            'properties': {'value': {'type': 'string'}},
        }
    return {
        'openapi': '3.0.0',
        'info': {'title': 'Many operations', 'version': '1.0.0'},
        'paths': paths,
        'components': {'schemas': schemas},
    }


def make_plugin(spec: dict) -> tuple[BackbonePlugin, SharedStorage]:
    """A backbone plugin and an empty storage for ``spec``."""
    api = OpenAPI.model_validate(spec)
    plugin = BackbonePlugin(
        SchemaResolver(api), logging.getLogger('haru.BackbonePlugin')
    )
    return plugin, SharedStorage(api=api)


def make_dependencies() -> DependencyManager:
    return DependencyManager(PathManager(), module='Test.py')


def unparse(node: ast.AST | list[ast.stmt]) -> str:
    if isinstance(node, list):
        node = ast.Module(body=node, type_ignores=[])
    return ast.unparse(ast.fix_missing_locations(node))


def generate_sources(spec: dict) -> tuple[dict[str, str], SharedStorage]:
    """Run the backbone plugin over ``spec`` and unparse what it produced."""
    plugin, storage = make_plugin(spec)
    asyncio.run(plugin.execute(storage))
    return {module.path: unparse(module.to_ast()) for module in storage.sources}, storage
