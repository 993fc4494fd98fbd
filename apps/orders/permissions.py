"""
Custom permission classes for orders app.

Staff run the money side (orders from quotes, payments, refunds, invoices,
purchase orders); customers can only read their own orders.
"""
from rest_framework.permissions import BasePermission


class IsShopStaff(BasePermission):
    """
    Allows access only to shop staff and admins.

    Usage:
        def get_permissions(self):
            if self.action == 'reconcile':
                return [IsAuthenticated(), IsShopStaff()]
            return super().get_permissions()
    """

    message = 'Only shop staff can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_shop_staff)


class IsOrderCustomerOrStaff(BasePermission):
    """Customers may view their own orders; staff may view any."""

    message = 'You do not have permission to view this order.'

    def has_object_permission(self, request, view, obj):
        if request.user.is_shop_staff:
            return True
        return obj.customer_id == request.user.id
