from rehab_server.geo.geohash import encode, distance_km, query_bounds

__all__ = ['encode', 'distance_km', 'query_bounds']
