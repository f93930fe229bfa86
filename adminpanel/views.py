import logging

from django.db.models import Avg, Count, Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import Role, User
from accounts.permissions import IsAdmin
from accounts.serializers import AdminUserCreateSerializer, AdminUserUpdateSerializer, UserSerializer
from listings.schemas import STORES, USERS
from listings.service import list_collection, shape_store_row
from ratings.models import Rating
from stores.models import Store
from stores.serializers import StoreCreateSerializer, StoreSerializer

logger = logging.getLogger(__name__)


class AdminDashboardView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        users = User.objects.aggregate(
            total_users=Count("id"),
            normal_users=Count("id", filter=Q(role=Role.NORMAL_USER)),
            store_owners=Count("id", filter=Q(role=Role.STORE_OWNER)),
            admin_users=Count("id", filter=Q(role=Role.ADMIN)),
        )
        stores = Store.objects.aggregate(
            total_stores=Count("id"),
            stores_with_ratings=Count("id", filter=Q(total_ratings__gt=0)),
        )
        ratings = Rating.objects.aggregate(total_ratings=Count("id"), average_rating=Avg("score"))

        recent_users = User.objects.order_by("-created_at", "-id")[:5]
        recent_stores = Store.objects.select_related("owner").order_by("-created_at", "-id")[:5]
        recent_ratings = (
            Rating.objects.select_related("user", "store")
            .order_by("-created_at", "-id")[:10]
        )

        return Response(
            {
                "stats": {
                    **users,
                    **stores,
                    "total_ratings": ratings["total_ratings"],
                    "average_rating": round(float(ratings["average_rating"] or 0), 1),
                },
                "recentActivities": {
                    "users": UserSerializer(recent_users, many=True).data,
                    "stores": StoreSerializer(recent_stores, many=True).data,
                    "ratings": [
                        {
                            "id": r.pk,
                            "rating": r.score,
                            "created_at": r.created_at,
                            "user_name": r.user.name,
                            "store_name": r.store.name,
                        }
                        for r in recent_ratings
                    ],
                },
            },
            status=status.HTTP_200_OK,
        )


class AdminUserListView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        page = list_collection(USERS, request.user, request.query_params)
        return Response(page.as_response("users"), status=status.HTTP_200_OK)

    def post(self, request):
        serializer = AdminUserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Admin %s created account %s (%s)", request.user.pk, user.pk, user.role)
        return Response(
            {"message": "User created successfully", "user": serializer.data},
            status=status.HTTP_201_CREATED,
        )


class AdminUserDetailView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, user_id):
        user = get_object_or_404(User.objects.select_related("store"), pk=user_id)
        return Response({"user": UserSerializer(user).data}, status=status.HTTP_200_OK)

    def patch(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        serializer = AdminUserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Admin %s updated account %s", request.user.pk, user.pk)
        return Response(
            {"message": "User updated successfully", "user": serializer.data},
            status=status.HTTP_200_OK,
        )


class AdminStoreListView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        page = list_collection(STORES, request.user, request.query_params, shape=shape_store_row)
        return Response(page.as_response("stores"), status=status.HTTP_200_OK)

    def post(self, request):
        serializer = StoreCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = serializer.save()
        logger.info("Admin %s created store %s (owner=%s)", request.user.pk, store.pk, store.owner_id)
        return Response(
            {"message": "Store created successfully", "store": StoreSerializer(store).data},
            status=status.HTTP_201_CREATED,
        )


class StoreOwnerOptionsView(APIView):
    """가게가 아직 없는 점주 목록 (가게 배정용)."""
    permission_classes = [IsAdmin]

    def get(self, request):
        owners = (
            User.objects.filter(role=Role.STORE_OWNER, store__isnull=True)
            .order_by("name", "id")
            .values("id", "name", "email", "address")
        )
        return Response({"storeOwners": list(owners)}, status=status.HTTP_200_OK)
