from rest_framework import serializers

from ranks.hierarchy import Rank, get_rank_display

from .models import Invitation, User


class UserSerializer(serializers.ModelSerializer):
    id = serializers.UUIDField(source="public_id", read_only=True)
    rank_display = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "first_name",
            "last_name",
            "rank",
            "rank_display",
            "avatar_url",
            "setup_status",
            "subscription_status",
            "login_count",
            "last_login",
            "created_at",
        )
        read_only_fields = fields

    def get_rank_display(self, obj):
        return get_rank_display(obj.rank)


class ProfileSerializer(serializers.ModelSerializer):
    id = serializers.UUIDField(source="public_id", read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "rank",
            "email_verified",
            "first_name",
            "last_name",
            "secondary_email",
            "avatar_url",
            "brand_logo_url",
            "setup_status",
            "subscription_status",
            "business_country",
            "entity_name",
            "social_name",
            "phone_number",
            "org_id",
            "theme_name",
            "theme_dark",
            "miror_enchantment_enabled",
            "miror_enchantment_timing",
            "dashboard_layout",
            "dashboard_widgets",
            "login_count",
        )
        read_only_fields = (
            "id",
            "email",
            "rank",
            "email_verified",
            "subscription_status",
            "org_id",
            "login_count",
        )

    def validate_dashboard_widgets(self, value):
        if not isinstance(value, list) or not all(isinstance(w, str) for w in value):
            raise serializers.ValidationError("Must be a list of widget names.")
        return value


class SetRankSerializer(serializers.Serializer):
    rank = serializers.ChoiceField(choices=Rank.choices)


class InvitationSerializer(serializers.ModelSerializer):
    id = serializers.UUIDField(source="public_id", read_only=True)
    invited_by = serializers.SerializerMethodField()

    class Meta:
        model = Invitation
        fields = ("id", "email", "rank", "status", "invited_by", "created_at", "accepted_at")
        read_only_fields = fields

    def get_invited_by(self, obj):
        return str(obj.invited_by.public_id) if obj.invited_by else None


class InvitationCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    rank = serializers.ChoiceField(choices=Rank.choices)
