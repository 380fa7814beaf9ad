"""Product catalog: model, predicates, repositories, facets and listing."""
