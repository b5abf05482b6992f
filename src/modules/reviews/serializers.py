from __future__ import annotations

from rest_framework import serializers

from modules.reviews.models import MAX_RATING, MIN_RATING, Review


class ReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            "id",
            "product_id",
            "user_id",
            "rating",
            "content",
            "created_at",
            "user_name",
        ]
        read_only_fields = fields

    def get_user_name(self, obj: Review) -> str:
        return obj.user.get_full_name() or obj.user.get_username()


class ReviewCreateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=MIN_RATING, max_value=MAX_RATING)
    content = serializers.CharField(max_length=2000)
