from flask_restful import Resource, abort

from models.chart import ChartType

from . import api


def chart_type_info(chart_type):
    return {
        "id": chart_type.id,
        "name": chart_type.name,
        "description": chart_type.description,
        "releases": chart_type.number_of_releases,
    }


class ChartTypeList(Resource):
    def get(self):
        return [chart_type_info(ct) for ct in ChartType.get_all()]


class ChartTypeReleases(Resource):
    def get(self, chart_type_id):
        chart_type = ChartType.get_by_id(chart_type_id)
        if chart_type is None:
            abort(404, message=f"No chart type with ID {chart_type_id}")

        return {
            **chart_type_info(chart_type),
            "release_dates": [r.submitted.isoformat() for r in chart_type.releases],
        }


api.add_resource(ChartTypeList, "/charts")
api.add_resource(ChartTypeReleases, "/charts/<int:chart_type_id>")
