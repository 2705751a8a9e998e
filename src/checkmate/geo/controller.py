from __future__ import annotations

from flask import Flask

from ..common.http import domain_error_response, json_body, json_ok, unexpected_error_response
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/geofences", methods=["GET"], endpoint="api_geofences")
    def api_geofences():
        try:
            fences = container.geofence_repo.list_geofences()
        except Exception:
            return unexpected_error_response("loading geofences")
        return json_ok(
            {
                "geofences": [
                    {
                        "name": f.name,
                        "latitude": f.center.latitude,
                        "longitude": f.center.longitude,
                        "radius": f.radius_meters,
                        "description": f.description,
                    }
                    for f in fences
                ],
                "count": len(fences),
            }
        )

    @app.route("/api/geofences/validate", methods=["POST"], endpoint="api_validate_location")
    def api_validate_location():
        data = json_body()
        point = data.get("location", data)
        try:
            verdict = container.geo_validator.validate(point, container.geofence_repo.list_geofences())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return unexpected_error_response("validating location")
        return json_ok(
            {
                "is_valid": verdict.is_valid,
                "matched_fence": verdict.matched_fence,
                "reason": verdict.reason,
                "nearest_fence": verdict.nearest_fence,
                "nearest_distance_meters": verdict.nearest_distance_meters,
            }
        )
