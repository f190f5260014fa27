from django.urls import include, path

urlpatterns = [
    path("", include("modules.core.urls")),
    path("", include("modules.orders.urls")),
]

handler404 = "modules.core.views.route_not_found"
handler500 = "modules.core.views.server_error"
