from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id',
            'name',
            'username',
            'email',
            'role',
            'is_active',
            'date_joined',
        ]
        read_only_fields = fields


class UserCreateSerializer(serializers.ModelSerializer):
    """Admin provisioning of a new staff account."""
    password = serializers.CharField(write_only=True)
    username = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ['name', 'username', 'email', 'password', 'role']
        extra_kwargs = {'name': {'required': True, 'allow_blank': False}}

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Já existe um usuário com este email.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        # Login is by email; the username only has to be unique
        username = validated_data.get('username') or validated_data['email']
        return User.objects.create_user(
            username=username,
            email=validated_data['email'],
            password=validated_data['password'],
            name=validated_data['name'],
            role=validated_data.get('role', User.ROLE_MEMBRO),
        )
